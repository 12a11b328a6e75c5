from __future__ import annotations

from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from stock_dashboard.schemas.dashboard import DashboardState

SAMPLE_DATA_WARNING = "Real-time data is currently unavailable. Showing sample data."
TEMPLATE_NAME = "stocks.html"


def format_price(price: float) -> str:
    return f"${price:.2f}"


def format_change(change_pct: float) -> str:
    sign = "+" if change_pct >= 0 else ""
    return f"{sign}{change_pct:.2f}%"


def change_class(change_pct: float) -> str:
    return "positive" if change_pct >= 0 else "negative"


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[1] / "templates"))
templates.env.filters["price"] = format_price
templates.env.filters["change"] = format_change
templates.env.filters["change_class"] = change_class


def subtitle(state: DashboardState) -> str:
    text = "Real-time stock prices and daily changes"
    if state.provider_label:
        text += f" from {state.provider_label}"
        if state.from_cache:
            text += " (cached)"
    return text


def page_context(state: DashboardState) -> dict:
    return {
        "state": state,
        "subtitle": subtitle(state),
        "sample_warning": SAMPLE_DATA_WARNING,
    }


def render_page(state: DashboardState) -> str:
    return templates.get_template(TEMPLATE_NAME).render(page_context(state))


def page_response(request: Request, state: DashboardState):
    return templates.TemplateResponse(request, TEMPLATE_NAME, page_context(state))


def render_text(state: DashboardState) -> str:
    if state.status == "LOADING":
        return "Loading quotes..."

    lines = ["Stock Market Overview", subtitle(state)]
    if state.using_sample_data:
        lines.append(f"! {SAMPLE_DATA_WARNING}")
    lines.append("")
    lines.append(f"{'SYMBOL':<8}{'PRICE':>12}{'CHANGE':>10}")
    for quote in state.quotes:
        lines.append(f"{quote.symbol:<8}{format_price(quote.price):>12}{format_change(quote.change_pct):>10}")
    return "\n".join(lines)
