"""
hooks-toolkit
Build ledger hooks with the external toolchain and deploy them with SetHook.
"""

from .version import __version__  # noqa: F401

# Config & errors
from .config import HooksSettings, get_settings  # noqa: F401
from .errors import (  # noqa: F401
    HooksToolkitError,
    EncodingError,
    ToolInvocationError,
    GuardCheckError,
    ArtifactMissingError,
    CodecError,
    RpcError,
    SubmissionError,
    SubmissionRetryError,
)

# Payload
from .payload import (  # noqa: F401
    DEFAULT_HOOK_ON,
    HookParameter,
    HookPayload,
    build_payload,
    encode_parameters,
    hook_on_from_types,
    namespace_digest,
)

# Toolchain
from .toolchain import FailurePolicy, ToolchainPipeline  # noqa: F401

# Network
from .rpc.http import RpcClient  # noqa: F401
from .tx import (  # noqa: F401
    LedgerClient,
    SubmitOptions,
    Wallet,
    estimate_fee,
    submit_with_retries,
)

# Deploy
from .deploy import HookDeploymentService, set_hook  # noqa: F401

__all__ = [
    "__version__",
    # Core
    "HooksSettings", "get_settings",
    "HooksToolkitError", "EncodingError", "ToolInvocationError", "GuardCheckError",
    "ArtifactMissingError", "CodecError", "RpcError", "SubmissionError", "SubmissionRetryError",
    # Payload
    "DEFAULT_HOOK_ON", "HookParameter", "HookPayload",
    "build_payload", "encode_parameters", "hook_on_from_types", "namespace_digest",
    # Toolchain
    "FailurePolicy", "ToolchainPipeline",
    # Network
    "RpcClient", "LedgerClient", "SubmitOptions", "Wallet",
    "estimate_fee", "submit_with_retries",
    # Deploy
    "HookDeploymentService", "set_hook",
]
