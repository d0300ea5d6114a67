"""Message templates for the customer bot."""

from html import escape

RULE = "━━━━━━━━━━━━━━━━━━━━━━"

WELCOME = (
    f"{RULE}\n"
    "📦 <b>Courier Desk</b>\n"
    f"{RULE}\n\n"
    "Get a delivery price in a few taps,\n"
    "place an order, or track a shipment.\n\n"
    "What would you like to do?"
)

HELP = (
    f"{RULE}\n"
    "ℹ️ <b>How It Works</b>\n"
    f"{RULE}\n\n"
    "1️⃣ Enter the pickup & drop-off address\n"
    "2️⃣ Pick the parcel size and speed\n"
    "3️⃣ Review the price & delivery time\n"
    "4️⃣ Leave your name and phone\n\n"
    "<b>Commands:</b>\n"
    "/start — Main menu\n"
    "/track — Track a shipment\n"
    "/cancel — Stop the current form\n"
    "/help — This message"
)

API_UNREACHABLE = "⚠️ Could not reach the server. Please try again later."

SPEED_LABELS = {"regular": "🐢 Regular", "fast": "⚡ Fast"}


def format_toasts(toasts: list[dict]) -> str:
    """Render API toasts as chat lines, in the order they were raised."""
    lines = []
    for toast in toasts or []:
        icon = "✅" if toast.get("level") == "success" else "❌"
        lines.append(f"{icon} {escape(str(toast.get('message', '')))}")
    return "\n".join(lines)


def format_pickup_confirmed(address: str) -> str:
    return f"✅ From: {escape(address)}\n\n📍 Now the <b>drop-off address</b>:"


def format_dropoff_confirmed(address: str) -> str:
    return f"✅ To: {escape(address)}\n\n📦 <b>What's the parcel size?</b>"


def _days(n: int) -> str:
    return f"{n} day" if n == 1 else f"{n} days"


def format_quote(quote: dict) -> str:
    """Price estimate card for a calculated quote."""
    speed = SPEED_LABELS.get(quote.get("speed"), quote.get("speed", ""))
    return (
        f"{RULE}\n"
        f"💰 <b>Price Estimate</b>\n"
        f"{RULE}\n\n"
        f"📍 From: {escape(quote['from'])}\n"
        f"📍 To: {escape(quote['to'])}\n\n"
        f"📏 Distance: <b>{quote['distance']:.1f} km</b>\n"
        f"📦 Size: <b>{str(quote['size']).upper()}</b> ({quote['rate']:g}/km)\n"
        f"🚚 Speed: {speed}\n"
        f"⏱️ Delivery: <b>~{_days(quote['duration'])}</b>\n\n"
        f"{RULE}\n"
        f"<b>💰 TOTAL: {quote['total']}</b>\n"
        f"{RULE}"
    )


def format_tracking(info: dict) -> str:
    """Tracking card; backend fields are shown as they come."""
    text = (
        f"{RULE}\n"
        f"📍 <b>Shipment Status</b>\n"
        f"{RULE}\n\n"
    )
    status = info.get("status")
    if status:
        text += f"📋 Status: <b>{escape(str(status).replace('_', ' ').title())}</b>\n"
    for key, value in info.items():
        if key == "status" or value in (None, "", [], {}):
            continue
        label = str(key).replace("_", " ").capitalize()
        text += f"• {escape(label)}: {escape(str(value))}\n"
    return text.rstrip()


def format_order_placed(order_id) -> str:
    return (
        f"{RULE}\n"
        f"✅ <b>Order Placed!</b>\n"
        f"{RULE}\n\n"
        f"📋 Order number: <code>{escape(str(order_id))}</code>\n\n"
        f"Use it with /track to follow your shipment."
    )
