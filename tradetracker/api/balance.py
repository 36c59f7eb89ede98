"""Balance API — base balance and the effective (base + PnL) view."""

from fastapi import APIRouter, Depends, HTTPException

from tradetracker.api.deps import get_tracker
from tradetracker.engine.state import TrackerState
from tradetracker.schemas.trade import BalanceRead, BalanceUpdate
from tradetracker.services.balance_tracker import BalanceValidationError

router = APIRouter(prefix="/api/balance", tags=["balance"])


@router.get("", response_model=BalanceRead)
async def get_balance(state: TrackerState = Depends(get_tracker)):
    return BalanceRead.from_effective(state.effective_balance())


@router.put("", response_model=BalanceRead)
async def update_balance(data: BalanceUpdate, state: TrackerState = Depends(get_tracker)):
    try:
        state.balance.set_base(data.amount)
    except BalanceValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return BalanceRead.from_effective(state.effective_balance())
