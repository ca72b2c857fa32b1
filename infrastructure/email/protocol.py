"""EmailSender protocol — AuthService depends on this, not the concrete provider.

Every method either returns normally (mail accepted) or raises
errors.EmailDeliveryError. The caller decides whether a failure is fatal.
"""

from typing import Optional, Protocol


class EmailSender(Protocol):
    async def send_verification(
        self, email: str, token: str, username: Optional[str]
    ) -> None: ...

    async def send_password_reset(
        self, email: str, token: str, username: Optional[str]
    ) -> None: ...

    async def send_welcome(self, email: str, username: Optional[str]) -> None: ...
