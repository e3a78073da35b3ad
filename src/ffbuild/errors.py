"""Typed build error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error identifiers used across the build pipeline."""

    VALIDATION = "E_VALIDATION"
    FETCH = "E_FETCH"
    CONFIGURE = "E_CONFIGURE"
    COMPILE = "E_COMPILE"
    INSTALL = "E_INSTALL"
    TOOLCHAIN = "E_TOOLCHAIN"
    DEPENDENCY = "E_DEPENDENCY"
    MERGE = "E_MERGE"
    VERIFICATION = "E_VERIFICATION"
    REPRODUCIBILITY = "E_REPRODUCIBILITY"


class FfbuildError(Exception):
    """Base error class that carries code, optional hint, and context.

    Errors raised while building one library for one architecture also name
    both, so console and JSON-lines records can be filtered by either.
    """

    code: str
    hint: str | None
    context: Mapping[str, str]
    library: str | None = None
    arch: str | None = None

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        if self.context:
            for k, v in self.context.items():
                if v:
                    parts.append(f"  {k}: {v}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        if self.library is not None:
            payload["library"] = self.library
        if self.arch is not None:
            payload["arch"] = self.arch
        return payload


class ValidationError(FfbuildError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.VALIDATION, hint=hint, context=context)


class FetchError(FfbuildError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.FETCH, hint=hint, context=context)


class StepError(FfbuildError):
    """Failure of a native build-system step for one library and architecture."""

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        library: str,
        arch: str,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        merged = {"library": library, "arch": arch}
        merged.update(context or {})
        super().__init__(message, code=code, hint=hint, context=merged)
        self.library = library
        self.arch = arch


class ConfigureError(StepError):
    def __init__(
        self,
        message: str,
        *,
        library: str,
        arch: str,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.CONFIGURE,
            library=library,
            arch=arch,
            hint=hint,
            context=context,
        )


class CompileError(StepError):
    def __init__(
        self,
        message: str,
        *,
        library: str,
        arch: str,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.COMPILE,
            library=library,
            arch=arch,
            hint=hint,
            context=context,
        )


class InstallError(StepError):
    def __init__(
        self,
        message: str,
        *,
        library: str,
        arch: str,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.INSTALL,
            library=library,
            arch=arch,
            hint=hint,
            context=context,
        )


class ToolchainError(FfbuildError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.TOOLCHAIN, hint=hint, context=context)


class DependencyError(FfbuildError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.DEPENDENCY, hint=hint, context=context)


class MergeError(FfbuildError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.MERGE, hint=hint, context=context)


class VerificationError(FfbuildError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.VERIFICATION, hint=hint, context=context)


class ReproducibilityError(FfbuildError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.REPRODUCIBILITY, hint=hint, context=context)


__all__ = [
    "CompileError",
    "ConfigureError",
    "DependencyError",
    "ErrorCode",
    "FetchError",
    "FfbuildError",
    "InstallError",
    "MergeError",
    "ReproducibilityError",
    "StepError",
    "ToolchainError",
    "ValidationError",
    "VerificationError",
]
