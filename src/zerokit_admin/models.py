"""Admin API request and response models."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class UserRegistration:
    """
    A pending user registration session.

    Attributes:
        user_id: Identifier reserved for the new user
        reg_session_id: Registration session identifier
        reg_session_verifier: Server-held verifier, kept by the application
            backend until the registration is validated
    """

    user_id: str
    reg_session_id: str
    reg_session_verifier: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserRegistration":
        """
        Create an instance from an ``init-user-registration`` response.

        Args:
            data: Decoded JSON response

        Returns:
            UserRegistration instance
        """
        return cls(
            user_id=data["UserId"],
            reg_session_id=data["RegSessionId"],
            reg_session_verifier=data["RegSessionVerifier"],
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "UserId": self.user_id,
            "RegSessionId": self.reg_session_id,
            "RegSessionVerifier": self.reg_session_verifier,
        }


@dataclass(frozen=True)
class RegistrationValidation:
    """Payload of ``validate-user-registration``."""

    user_id: str
    reg_session_id: str
    reg_session_verifier: str
    reg_validation_verifier: str

    @classmethod
    def for_registration(
        cls,
        registration: UserRegistration,
        reg_validation_verifier: str,
    ) -> "RegistrationValidation":
        """Combine a pending registration with the verifier the client returned."""
        return cls(
            user_id=registration.user_id,
            reg_session_id=registration.reg_session_id,
            reg_session_verifier=registration.reg_session_verifier,
            reg_validation_verifier=reg_validation_verifier,
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "RegSessionId": self.reg_session_id,
            "RegSessionVerifier": self.reg_session_verifier,
            "RegValidationVerifier": self.reg_validation_verifier,
            "UserId": self.user_id,
        }
