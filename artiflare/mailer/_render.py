"""
HTML bodies for the two order emails.

- customer invoice: every line with quantity, unit price and line total;
- artisan notification: what was ordered and by whom.

All interpolated values are HTML-escaped.
"""

from __future__ import annotations

from dataclasses import dataclass
from html import escape

from artiflare.notify import OrderEmailPayload, ProductLine

CURRENCY_SYMBOL = "₹"


@dataclass(frozen=True, slots=True)
class Email:
    to: str
    subject: str
    html: str


def format_amount(value: float) -> str:
    return f"{CURRENCY_SYMBOL}{value:,.2f}"


def _line_row(line: ProductLine) -> str:
    image = (
        f'<img src="{escape(line.image)}" alt="{escape(line.name)}" width="48" height="48">'
        if line.image
        else ""
    )
    return (
        "<tr>"
        f"<td>{image}</td>"
        f"<td>{escape(line.name)}</td>"
        f'<td align="center">{line.quantity}</td>'
        f'<td align="right">{format_amount(line.price)}</td>'
        f'<td align="right">{format_amount(line.line_total)}</td>'
        "</tr>"
    )


def _items_table(payload: OrderEmailPayload) -> str:
    rows = "".join(_line_row(line) for line in payload.order.products)
    return (
        '<table cellpadding="6" cellspacing="0" border="0" width="100%">'
        "<thead><tr><th></th><th align=\"left\">Item</th><th>Qty</th>"
        '<th align="right">Price</th><th align="right">Total</th></tr></thead>'
        f"<tbody>{rows}</tbody>"
        f'<tfoot><tr><td colspan="4" align="right"><strong>Order total</strong></td>'
        f'<td align="right"><strong>{format_amount(payload.order.total)}</strong></td></tr></tfoot>'
        "</table>"
    )


def _page(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        f"<title>{escape(title)}</title></head>"
        '<body style="font-family: sans-serif; color: #222;">'
        f"{body}"
        '<p style="color: #888; font-size: 12px;">Artiflare · handcrafted with care.</p>'
        "</body></html>"
    )


def render_customer_invoice(payload: OrderEmailPayload) -> Email:
    order = payload.order
    body = (
        f"<h2>Thank you for your order, {escape(payload.customer.name)}!</h2>"
        f"<p>Order <strong>#{escape(order.id)}</strong> placed on {escape(order.date)}.</p>"
        f"<p>Crafted by {escape(payload.artisan.name)}.</p>"
        f"{_items_table(payload)}"
        "<p>We will let you know as soon as it ships.</p>"
    )
    subject = f"Your Artiflare order #{order.id}"
    return Email(to=payload.customer.email, subject=subject, html=_page(subject, body))


def render_artisan_notification(payload: OrderEmailPayload) -> Email:
    order = payload.order
    units = sum(line.quantity for line in order.products)
    body = (
        f"<h2>New order for {escape(payload.artisan.name)}</h2>"
        f"<p>{escape(payload.customer.name)} ordered {units} item(s) "
        f"on {escape(order.date)} (order <strong>#{escape(order.id)}</strong>).</p>"
        f"{_items_table(payload)}"
        "<p>Please prepare the items for shipping.</p>"
    )
    subject = f"New order #{order.id}"
    return Email(to=payload.artisan.email, subject=subject, html=_page(subject, body))


def render_order_emails(payload: OrderEmailPayload) -> tuple[Email, Email]:
    return render_customer_invoice(payload), render_artisan_notification(payload)


__all__ = (
    "Email",
    "format_amount",
    "render_customer_invoice",
    "render_artisan_notification",
    "render_order_emails",
)
