"""Keyboard builders for customer bot interactions."""

from aiogram.types import (
    InlineKeyboardButton, InlineKeyboardMarkup, KeyboardButton, ReplyKeyboardMarkup,
)

SIZE_EMOJI = {"xs": "✉️", "s": "📦", "m": "📦", "l": "📦📦", "xl": "🚛"}
SPEED_EMOJI = {"regular": "🐢", "fast": "⚡"}


def main_menu_keyboard() -> InlineKeyboardMarkup:
    """Main menu keyboard."""
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="📦 Order a Delivery", callback_data="order_delivery")],
        [InlineKeyboardButton(text="📍 Track a Shipment", callback_data="track_shipment"),
         InlineKeyboardButton(text="ℹ️ Help", callback_data="help")],
    ])


def location_keyboard() -> ReplyKeyboardMarkup:
    """Offer the current location as the 'from' address."""
    return ReplyKeyboardMarkup(
        keyboard=[[KeyboardButton(text="📍 Use my location", request_location=True)]],
        resize_keyboard=True,
        one_time_keyboard=True,
    )


def contact_keyboard() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        keyboard=[[KeyboardButton(text="📱 Share Contact", request_contact=True)]],
        resize_keyboard=True,
        one_time_keyboard=True,
    )


def suggestions_keyboard(suggestions: list[str], prefix: str) -> InlineKeyboardMarkup | None:
    """
    Address suggestions as buttons. Callback data carries only the index
    because Telegram limits it to 64 bytes.
    """
    if not suggestions:
        return None
    buttons = [
        [InlineKeyboardButton(text=text[:60], callback_data=f"{prefix}_{i}")]
        for i, text in enumerate(suggestions)
    ]
    buttons.append([InlineKeyboardButton(text="✅ Keep as typed", callback_data=f"{prefix}_keep")])
    return InlineKeyboardMarkup(inline_keyboard=buttons)


def size_keyboard(sizes: list[dict]) -> InlineKeyboardMarkup:
    """Size tier selection, one row per tier from the catalog."""
    buttons = [
        [InlineKeyboardButton(
            text=f"{SIZE_EMOJI.get(s['value'], '📦')} {s['value'].upper()} — {s['label']}",
            callback_data=f"size_{s['value']}",
        )]
        for s in sizes
    ]
    buttons.append([InlineKeyboardButton(text="🏠 Main Menu", callback_data="back_to_menu")])
    return InlineKeyboardMarkup(inline_keyboard=buttons)


def speed_keyboard(speeds: list[dict]) -> InlineKeyboardMarkup:
    """Regular vs fast delivery."""
    row = [
        InlineKeyboardButton(
            text=f"{SPEED_EMOJI.get(s['value'], '🚚')} {s['label']}",
            callback_data=f"speed_{s['value']}",
        )
        for s in speeds
    ]
    return InlineKeyboardMarkup(inline_keyboard=[
        row,
        [InlineKeyboardButton(text="🏠 Main Menu", callback_data="back_to_menu")],
    ])


def quote_keyboard() -> InlineKeyboardMarkup:
    """Actions under a calculated quote."""
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="✅ Place Order", callback_data="place_order")],
        [InlineKeyboardButton(text="✏️ Change Route", callback_data="order_delivery"),
         InlineKeyboardButton(text="🏠 Main Menu", callback_data="back_to_menu")],
    ])


def retry_keyboard() -> InlineKeyboardMarkup:
    """Shown after a failed calculation."""
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="🔄 Recalculate", callback_data="recalculate")],
        [InlineKeyboardButton(text="✏️ Change Route", callback_data="order_delivery"),
         InlineKeyboardButton(text="🏠 Main Menu", callback_data="back_to_menu")],
    ])
