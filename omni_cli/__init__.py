"""omni-cli — operator CLI for Bitwarden vault lookups and Epicor case operations."""

from omni_cli.client import OmniClient
from omni_cli.config import VERSION
from omni_cli.exceptions import (
    CliError,
    ConfigurationError,
    DecodeError,
    EndpointNotPublishedError,
    ExternalToolError,
    RemoteApplicationError,
    SetupError,
    TransportError,
)
from omni_cli.types import (
    CaseStatusResult,
    CompleteTaskResult,
    LastCommentResult,
    MutationResult,
    VaultResult,
)

__all__ = [
    "VERSION",
    "OmniClient",
    "CliError",
    "ConfigurationError",
    "DecodeError",
    "EndpointNotPublishedError",
    "ExternalToolError",
    "RemoteApplicationError",
    "SetupError",
    "TransportError",
    "CaseStatusResult",
    "CompleteTaskResult",
    "LastCommentResult",
    "MutationResult",
    "VaultResult",
]
