from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from stock_dashboard.errors import RefreshInProgressError
from stock_dashboard.services.quote_cache import now_ms
from stock_dashboard.views.stock_table import page_response

router = APIRouter()
page_router = APIRouter()


@router.get('/stocks')
def get_stocks(request: Request):
    return request.app.state.dashboard.mount().model_dump()


@router.post('/stocks/refresh')
def refresh_stocks(request: Request):
    try:
        state = request.app.state.dashboard.try_refresh()
    except RefreshInProgressError as exc:
        raise HTTPException(status_code=409, detail='REFRESH_IN_PROGRESS') from exc
    return state.model_dump()


@router.get('/metrics/quote')
def quote_metrics(request: Request):
    dashboard = request.app.state.dashboard
    metrics = dashboard.fetcher.metrics()
    entry = dashboard.cache.read()
    metrics.update(
        {
            'cache_present': entry is not None,
            'cache_age_ms': None if entry is None else max(now_ms() - entry.fetched_at_ms, 0),
            'cache_fresh': entry is not None and dashboard.cache.is_fresh(entry),
            'dashboard_status': dashboard.state().status,
        }
    )
    return metrics


@page_router.get('/')
def index():
    return RedirectResponse(url='/stocks')


@page_router.get('/stocks', response_class=HTMLResponse)
def stocks_page(request: Request):
    return page_response(request, request.app.state.dashboard.mount())


@page_router.post('/stocks/refresh')
def stocks_page_refresh(request: Request):
    try:
        request.app.state.dashboard.try_refresh()
    except RefreshInProgressError:
        print('[DASHBOARD][refresh_skipped] reason=REFRESH_IN_PROGRESS', flush=True)
    return RedirectResponse(url='/stocks', status_code=303)
