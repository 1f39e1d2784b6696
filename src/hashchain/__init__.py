"""Client SDK for hash-chain micropayment channels."""

from .application.channel.dtos import (
    CreateChannelParams,
    ReclaimChannelParams,
    RedeemChannelParams,
)
from .application.channel.use_cases.allowance import AllowanceService
from .application.channel.use_cases.channel_lifecycle import (
    ChannelClientConfig,
    HashchainChannelService,
)
from .crypto.hashchain import HashChain, generate_hash_chain, trust_anchor, verify_token
from .crypto.units import from_wei, generate_seed, to_wei
from .crypto.voucher import recover_voucher_signer, sign_voucher
from .domain.channel.entities import ZERO_ADDRESS, Channel, ChannelState
from .domain.errors import (
    ApprovalFailedError,
    ContractError,
    HashchainError,
    InvalidErrorDataError,
    InvalidLengthError,
    SelectorNotFoundError,
    SignerRequiredError,
    TokenVerificationError,
)
from .infrastructure.contract.abis import hashchain_protocol_abi
from .infrastructure.contract.error_decoder import decode_contract_error

__all__ = [
    "AllowanceService",
    "ApprovalFailedError",
    "Channel",
    "ChannelClientConfig",
    "ChannelState",
    "ContractError",
    "CreateChannelParams",
    "HashChain",
    "HashchainChannelService",
    "HashchainError",
    "InvalidErrorDataError",
    "InvalidLengthError",
    "ReclaimChannelParams",
    "RedeemChannelParams",
    "SelectorNotFoundError",
    "SignerRequiredError",
    "TokenVerificationError",
    "ZERO_ADDRESS",
    "decode_contract_error",
    "from_wei",
    "generate_hash_chain",
    "generate_seed",
    "hashchain_protocol_abi",
    "recover_voucher_signer",
    "sign_voucher",
    "to_wei",
    "trust_anchor",
    "verify_token",
]
