"""Base check protocol and a functional check helper."""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

from cert_preflight.models.check import CheckLevel, CheckMetadata, HelpText
from cert_preflight.models.image import ImageReference


@runtime_checkable
class Check(Protocol):
    """Protocol for certification checks.

    A check inspects the image under test and returns True when the image
    meets its requirement and False when it does not. A check that cannot
    reach a verdict raises; the runner records that as an error without
    stopping the other checks.

    To implement a custom check:
    1. Create a class that implements this protocol
    2. Register it with CheckRegistry or pass it to the Engine

    Example:
        class HasLicenseCheck:
            @property
            def name(self) -> str:
                return "HasLicense"

            @property
            def metadata(self) -> CheckMetadata:
                return CheckMetadata(description="Image ships license terms")

            @property
            def help_text(self) -> HelpText:
                return HelpText(message="A license is required", suggestion="Add /licenses")

            def validate(self, image_ref: ImageReference) -> bool:
                return bool(image_ref.filesystem.listdir("licenses"))
    """

    @property
    def name(self) -> str:
        """Unique name for this check."""
        ...

    @property
    def metadata(self) -> CheckMetadata:
        """Description, level and documentation links."""
        ...

    @property
    def help_text(self) -> HelpText:
        """Guidance shown when the check does not pass."""
        ...

    def validate(self, image_ref: ImageReference) -> bool:
        """Inspect the image.

        Args:
            image_ref: The image under test with its materialized filesystem

        Returns:
            True if the image passes, False if it fails

        Raises:
            Exception: If no verdict could be reached
        """
        ...


class GenericCheck:
    """Check built from a plain function.

    Example:
        no_root = GenericCheck(
            "RunAsNonRoot",
            lambda ref: ref.image_metadata.user not in ("", "0", "root"),
            metadata=CheckMetadata(description="Image does not run as root"),
        )
    """

    def __init__(
        self,
        name: str,
        validator: Callable[[ImageReference], bool],
        metadata: CheckMetadata | None = None,
        help_text: HelpText | None = None,
    ) -> None:
        self._name = name
        self._validator = validator
        self._metadata = metadata or CheckMetadata(description=name, level=CheckLevel.GOOD)
        self._help_text = help_text or HelpText(message=f"Check {name} did not pass")

    @property
    def name(self) -> str:
        return self._name

    @property
    def metadata(self) -> CheckMetadata:
        return self._metadata

    @property
    def help_text(self) -> HelpText:
        return self._help_text

    def validate(self, image_ref: ImageReference) -> bool:
        return self._validator(image_ref)

    def __repr__(self) -> str:
        return f"GenericCheck(name={self._name!r})"
