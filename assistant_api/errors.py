from __future__ import annotations


class AssistantError(Exception):
    """Base class for errors raised while producing an assistant reply."""


class ProviderConfigError(AssistantError):
    """The selected provider is unknown or is missing a required setting."""


class ProviderDispatchError(AssistantError):
    """The provider answered with a non-success status or could not be reached."""

    def __init__(self, provider_label: str) -> None:
        super().__init__(f"Failed to get response from {provider_label}")
        self.provider_label = provider_label


class AssistantDisabledError(Exception):
    """The AI assistant is switched off in the active settings."""


class DispatchInProgressError(Exception):
    """A reply is already being generated for this user."""
