"""
Client for the Rosetta gateway: HTTP API wrapper, signer, construction
pipeline and wallet.
"""
from .api import APIError, RosettaAPI
from .config import Config
from .pipeline import (
    ConstructionPipeline,
    OperationMismatch,
    PipelineError,
    PipelineStateError,
    Stage,
    SubmitUnconfirmed,
)
from .signer import Signer
from .utils import amount_to_string, string_to_amount
from .wallet import InsufficientFunds, Wallet

__all__ = [
    'APIError',
    'Config',
    'ConstructionPipeline',
    'InsufficientFunds',
    'OperationMismatch',
    'PipelineError',
    'PipelineStateError',
    'RosettaAPI',
    'Signer',
    'Stage',
    'SubmitUnconfirmed',
    'Wallet',
    'amount_to_string',
    'string_to_amount',
]
