"""
Filesystem verification helpers for applied changes.
Every write and delete performed by the staging engine is verified here.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass
class VerificationResult:
    """Represents the verification status of a filesystem mutation."""

    passed: bool
    details: str

    def to_dict(self) -> dict:
        return {"passed": self.passed, "details": self.details}


class FilesystemVerifier:
    """Post-operation verification for filesystem mutations."""

    @staticmethod
    def verify_write(path: Path, expected: bytes) -> VerificationResult:
        if not path.exists():
            return VerificationResult(False, f"{path} missing after write")
        try:
            actual = path.read_bytes()
        except OSError as exc:
            return VerificationResult(False, f"Could not verify contents: {exc}")
        if actual != expected:
            return VerificationResult(False, f"{path} contents differ after write")
        return VerificationResult(True, f"{path} verified ({len(expected)} bytes)")

    @staticmethod
    def verify_delete(target: Path) -> VerificationResult:
        if target.exists():
            return VerificationResult(False, f"{target} still present after delete")
        return VerificationResult(True, f"{target} removed")
