"""db3 config signing — web3_infra package.

- generate_config_signature: typed-data envelope + signature for a SystemConfig
- LocalAccountSigner: off-thread EIP-712 signing with a local key
- verify_setup / apply_setup: node-side recovery and admin check
"""

from .account import LocalAccountSigner, TypedDataSigner
from .config_signer import SignedPayload, generate_config_signature
from .setup_verifier import (
    PermissionDeniedError,
    SetupVerificationError,
    apply_setup,
    get_str_field,
    get_u64_field,
    verify_setup,
)
from .typed_data import (
    CONFIG_MESSAGE_FIELDS,
    build_config_typed_data,
    decode_typed_data_payload,
    encode_typed_data_payload,
)

__all__ = [
    "CONFIG_MESSAGE_FIELDS",
    "LocalAccountSigner",
    "PermissionDeniedError",
    "SetupVerificationError",
    "SignedPayload",
    "TypedDataSigner",
    "apply_setup",
    "build_config_typed_data",
    "decode_typed_data_payload",
    "encode_typed_data_payload",
    "generate_config_signature",
    "get_str_field",
    "get_u64_field",
    "verify_setup",
]
