"""
Account endpoints.
"""
from fastapi import APIRouter, Depends

from ..dependencies import get_gateway
from ..models import (
    AccountBalanceRequest,
    AccountBalanceResponse,
    AccountCoinsRequest,
    AccountCoinsResponse,
    Error,
)
from ..services.gateway import RosettaGateway

router = APIRouter(
    prefix="/account",
    tags=["account"],
    responses={500: {"model": Error}}
)


@router.post("/balance", response_model=AccountBalanceResponse, response_model_exclude_none=True)
async def account_balance(request: AccountBalanceRequest, gateway: RosettaGateway = Depends(get_gateway)):
    """
    Balance of an account at a block, or at the tip when no block is given.
    """
    return await gateway.account_balance(request)


@router.post("/coins", response_model=AccountCoinsResponse, response_model_exclude_none=True)
async def account_coins(request: AccountCoinsRequest, gateway: RosettaGateway = Depends(get_gateway)):
    """
    Unspent coins of an account (UTXO chains only).
    """
    return await gateway.account_coins(request)
