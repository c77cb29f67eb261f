"""EmailProvider protocol. Services depend on this, not on the SMTP implementation."""

from typing import Optional, Protocol


class EmailProvider(Protocol):
    async def send_mfa_code(
        self, email: str, code: str, user_name: Optional[str] = None
    ) -> bool: ...

    async def send_password_reset_code(
        self, email: str, code: str, user_name: Optional[str] = None
    ) -> bool: ...

    async def send_welcome_email(
        self, email: str, user_name: Optional[str] = None
    ) -> bool: ...

    async def test_connection(self) -> bool: ...
