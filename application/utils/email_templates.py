"""
订单相关邮件模板（subject/html/text）。

纯字符串格式化；金额参数为主货币单位。frontend_url 由调用方传入，
以便在不同环境下生成正确的跳转链接。
"""
from __future__ import annotations

from decimal import Decimal
from html import escape
from typing import Iterable, Mapping, Optional, Union

from application.ports.email import EmailMessage

Number = Union[int, float, Decimal]

_BUTTON_STYLE = (
    "background-color: #4F46E5; color: white; padding: 12px 24px; "
    "text-decoration: none; border-radius: 6px; display: inline-block;"
)


def _money(amount: Number, symbol: str = "$") -> str:
    return f"{symbol}{Decimal(str(amount)):.2f}"


def _button(url: str, label: str) -> str:
    return (
        '<div style="text-align: center; margin: 30px 0;">'
        f'<a href="{escape(url)}" style="{_BUTTON_STYLE}">{label}</a>'
        "</div>"
    )


def _wrap(body: str) -> str:
    return f'<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">{body}</div>'


def order_confirmation(
    to: str,
    name: str,
    order_number: str,
    items: Iterable[Mapping[str, object]],
    total: Number,
    frontend_url: str,
) -> EmailMessage:
    """items: [{name, quantity, price(主单位)}]"""
    order_url = f"{frontend_url}/orders/{order_number}"
    items = list(items)
    rows = "".join(
        "<tr>"
        f'<td style="padding: 10px;">{escape(str(i["name"]))}</td>'
        f'<td style="padding: 10px; text-align: center;">{i["quantity"]}</td>'
        f'<td style="padding: 10px; text-align: right;">{_money(i["price"])}</td>'  # type: ignore[arg-type]
        "</tr>"
        for i in items
    )
    items_text = "\n".join(
        f"- {i['name']} x{i['quantity']}: {_money(i['price'])}" for i in items  # type: ignore[arg-type]
    )
    html = _wrap(
        '<h1 style="color: #333;">Thanks for your order!</h1>'
        f"<p>Hi {escape(name)},</p>"
        f"<p>Your order <strong>#{order_number}</strong> has been confirmed and is being processed.</p>"
        '<table style="width: 100%; border-collapse: collapse;">'
        "<thead><tr><th>Item</th><th>Qty</th><th>Price</th></tr></thead>"
        f"<tbody>{rows}</tbody>"
        f'<tfoot><tr><td colspan="2">Total</td><td style="text-align: right;">{_money(total)}</td></tr></tfoot>'
        "</table>"
        f"{_button(order_url, 'View Order')}"
        '<p style="color: #666; font-size: 14px;">We\'ll send you another email when your order ships.</p>'
    )
    text = (
        f"Thanks for your order, {name}!\n\n"
        f"Order #{order_number} has been confirmed.\n\n"
        f"Items:\n{items_text}\n\n"
        f"Total: {_money(total)}\n\n"
        f"View your order: {order_url}\n\n"
        "We'll send you another email when your order ships."
    )
    return EmailMessage(to=to, subject=f"Order Confirmed - #{order_number}", html=html, text=text)


def order_shipped(
    to: str,
    name: str,
    order_number: str,
    frontend_url: str,
    tracking_number: Optional[str] = None,
) -> EmailMessage:
    order_url = f"{frontend_url}/orders/{order_number}"
    tracking_html = ""
    if tracking_number:
        tracking_html = (
            '<div style="background: #f0f9ff; border: 1px solid #0ea5e9; border-radius: 8px; padding: 15px;">'
            '<p style="margin: 0; font-weight: bold;">Tracking Number:</p>'
            f'<p style="font-family: monospace;">{escape(tracking_number)}</p>'
            "</div>"
        )
    html = _wrap(
        '<h1 style="color: #333;">Your order has shipped!</h1>'
        f"<p>Hi {escape(name)},</p>"
        f"<p>Great news! Your order <strong>#{order_number}</strong> is on its way.</p>"
        f"{tracking_html}{_button(order_url, 'Track Order')}"
    )
    lines = [f"Hi {name},", "", f"Great news! Your order #{order_number} has shipped.", ""]
    if tracking_number:
        lines += [f"Tracking Number: {tracking_number}", ""]
    lines.append(f"Track your order: {order_url}")
    return EmailMessage(
        to=to,
        subject=f"Your order is on its way! - #{order_number}",
        html=html,
        text="\n".join(lines),
    )


def order_delivered(to: str, name: str, order_number: str, frontend_url: str) -> EmailMessage:
    review_url = f"{frontend_url}/orders/{order_number}?review=true"
    html = _wrap(
        '<h1 style="color: #333;">Your order has been delivered!</h1>'
        f"<p>Hi {escape(name)},</p>"
        f"<p>Your order <strong>#{order_number}</strong> has been delivered.</p>"
        "<p>We hope you love your purchase! If you have any questions, feel free to reach out.</p>"
        f"{_button(review_url, 'Leave a Review')}"
    )
    text = (
        f"Hi {name},\n\n"
        f"Your order #{order_number} has been delivered.\n\n"
        "We hope you love your purchase!\n\n"
        f"Leave a review: {review_url}"
    )
    return EmailMessage(to=to, subject=f"Order delivered! - #{order_number}", html=html, text=text)


def payment_failed(to: str, name: str, order_number: str, reason: str, frontend_url: str) -> EmailMessage:
    cart_url = f"{frontend_url}/cart"
    reasons = (
        "Insufficient funds or credit limit reached",
        "Card details entered incorrectly",
        "Your bank blocked the transaction",
        "Card expired or invalid",
    )
    html = _wrap(
        '<h1 style="color: #dc2626; text-align: center;">Payment Failed</h1>'
        f"<p>Hi {escape(name)},</p>"
        f"<p>Unfortunately, your payment for order <strong>#{order_number}</strong> was not successful.</p>"
        '<div style="background: #fef2f2; border: 1px solid #dc2626; border-radius: 8px; padding: 15px;">'
        f'<p style="margin: 0; color: #991b1b;"><strong>Reason:</strong> {escape(reason)}</p>'
        "</div>"
        "<p>This could happen for several reasons:</p>"
        '<ul style="color: #666;">' + "".join(f"<li>{r}</li>" for r in reasons) + "</ul>"
        f"{_button(cart_url, 'Try Again')}"
        '<p style="color: #666; font-size: 14px;">If you continue to experience issues, '
        "please contact your bank or try a different payment method.</p>"
    )
    text = (
        f"Hi {name},\n\n"
        f"Your payment for order #{order_number} was not successful.\n\n"
        f"Reason: {reason}\n\n"
        "This could happen for several reasons:\n"
        + "\n".join(f"- {r}" for r in reasons)
        + f"\n\nTry again: {cart_url}\n\n"
        "If you continue to experience issues, please contact your bank or try a different payment method."
    )
    return EmailMessage(to=to, subject=f"Payment Failed - Order #{order_number}", html=html, text=text)


def refund_confirmation(to: str, name: str, order_number: str, amount: Number, frontend_url: str) -> EmailMessage:
    orders_url = f"{frontend_url}/orders"
    shown = _money(amount, "₪")
    html = _wrap(
        '<h1 style="color: #16a34a; text-align: center;">Refund Processed</h1>'
        f"<p>Hi {escape(name)},</p>"
        f"<p>Your refund for order <strong>#{order_number}</strong> has been processed.</p>"
        '<div style="background: #f0fdf4; border: 1px solid #16a34a; border-radius: 8px; padding: 20px; text-align: center;">'
        '<p style="margin: 0; font-size: 14px; color: #666;">Refund Amount</p>'
        f'<p style="font-size: 32px; font-weight: bold; color: #16a34a;">{shown}</p>'
        "</div>"
        '<p style="color: #666;">The refund will be credited back to your original payment method. '
        "Please allow 5-10 business days for the funds to appear in your account.</p>"
        f"{_button(orders_url, 'View Orders')}"
    )
    text = (
        f"Hi {name},\n\n"
        f"Your refund for order #{order_number} has been processed.\n\n"
        f"Refund Amount: {shown}\n\n"
        "The refund will be credited back to your original payment method. "
        "Please allow 5-10 business days for the funds to appear in your account.\n\n"
        f"View your orders: {orders_url}"
    )
    return EmailMessage(to=to, subject=f"Refund Processed - Order #{order_number}", html=html, text=text)
