"""Trades API — add, close, delete, view and export."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Response

from tradetracker.api.deps import get_tracker
from tradetracker.engine.state import TrackerState
from tradetracker.models.trade import new_trade
from tradetracker.schemas.trade import (
    FilterRead,
    FilterUpdate,
    SortRead,
    TradeClose,
    TradeCreate,
    TradeRead,
)
from tradetracker.services.csv_export import trades_to_csv
from tradetracker.services.trade_registry import (
    InvalidExitPriceError,
    TradeAlreadyClosedError,
    TradeNotFoundError,
)
from tradetracker.services.view_projector import FilterConfig, SortKey, annotate, toggle_sort

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trades", tags=["trades"])


@router.get("", response_model=list[TradeRead])
async def list_trades(state: TrackerState = Depends(get_tracker)):
    """Trades valued at the latest prices, in the current sort/filter order."""
    return [TradeRead.from_row(row) for row in state.rows()]


@router.post("", response_model=TradeRead, status_code=201)
async def create_trade(data: TradeCreate, state: TrackerState = Depends(get_tracker)):
    trade = new_trade(
        ticker=data.ticker,
        entry_price=data.entry_price,
        leverage=data.leverage,
        margin_size=data.margin_size,
        is_long=data.is_long,
    )
    state.registry.add(trade)

    from tradetracker.engine.scheduler import request_refresh
    request_refresh()

    return TradeRead.from_row(annotate(trade, state.prices.snapshot()))


@router.get("/export")
async def export_trades(state: TrackerState = Depends(get_tracker)):
    """CSV of exactly the rows the current view shows."""
    content = trades_to_csv(state.rows())
    filename = f"trades_{date.today().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/sort/{key}", response_model=SortRead)
async def sort_trades(key: SortKey, state: TrackerState = Depends(get_tracker)):
    """Select a sort column; re-selecting the active column flips direction."""
    state.sort_config = toggle_sort(state.sort_config, key)
    return SortRead.from_config(state.sort_config)


@router.put("/filter", response_model=FilterRead)
async def set_filter(data: FilterUpdate, state: TrackerState = Depends(get_tracker)):
    ticker = data.ticker.strip() if data.ticker else None
    state.filter_config = FilterConfig(ticker=ticker or None)
    return FilterRead.from_config(state.filter_config)


@router.delete("/filter", response_model=FilterRead)
async def clear_filter(state: TrackerState = Depends(get_tracker)):
    state.filter_config = FilterConfig()
    return FilterRead.from_config(state.filter_config)


@router.post("/{trade_id}/close", response_model=TradeRead)
async def close_trade(trade_id: str, data: TradeClose, state: TrackerState = Depends(get_tracker)):
    try:
        trade = state.registry.close(trade_id, data.exit_price)
    except TradeNotFoundError:
        raise HTTPException(status_code=404, detail="Trade not found")
    except TradeAlreadyClosedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InvalidExitPriceError as e:
        raise HTTPException(status_code=422, detail=str(e))

    row = annotate(trade, state.prices.snapshot())
    logger.info(f"Realized {trade.ticker} PnL={row.pnl:.2f} ({row.pnl_percentage:+.2f}%)")
    return TradeRead.from_row(row)


@router.delete("/{trade_id}", status_code=204)
async def delete_trade(trade_id: str, state: TrackerState = Depends(get_tracker)):
    try:
        state.registry.remove(trade_id)
    except TradeNotFoundError:
        raise HTTPException(status_code=404, detail="Trade not found")
