"""
Customer Telegram Bot Handler — Route form, order form and tracking.

FSM Flow:
  /start → Main Menu
  Order Delivery → From → To → Size → Speed → Price Estimate
  → Place Order → Name → Phone → Comment → Done
  Track → Shipment number → Status

The bot is a client of the web frontend API, like the browser page.
Each chat gets its own quote session (X-Session-Id = Telegram user id).
"""

import logging

import httpx
from aiogram import F, Router
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command, StateFilter
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message, ReplyKeyboardRemove

from config import settings
from keyboards.user_kb import (
    contact_keyboard, location_keyboard, main_menu_keyboard, quote_keyboard,
    retry_keyboard, size_keyboard, speed_keyboard, suggestions_keyboard,
)
from states.user_states import OrderFlow, TrackFlow
from texts import (
    API_UNREACHABLE, HELP, RULE, WELCOME, format_dropoff_confirmed, format_order_placed,
    format_pickup_confirmed, format_quote, format_toasts, format_tracking,
)

router = Router()
logger = logging.getLogger(__name__)
API = settings.API_BASE_URL


async def safe_edit(callback: CallbackQuery, text: str, **kwargs):
    """Edit message, silently ignoring 'message not modified' errors."""
    try:
        await callback.message.edit_text(text, **kwargs)
    except TelegramBadRequest as e:
        if "message is not modified" not in str(e):
            raise


async def _api_call(
    method: str,
    endpoint: str,
    session_id: int | None = None,
    **kwargs,
) -> dict | None:
    """Helper to call the web frontend API."""
    headers = {"X-Session-Id": str(session_id)} if session_id is not None else {}
    try:
        async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SEC) as client:
            resp = await client.request(
                method,
                f"{API}{endpoint}",
                params=kwargs.get("params"),
                json=kwargs.get("json"),
                headers=headers,
            )
            if resp.status_code == 200:
                return resp.json()
            logger.warning("API error: %s %s -> %s %s", method, endpoint, resp.status_code, resp.text[:200])
            return None
    except httpx.HTTPError as e:
        logger.warning("API call error: %s %s: %s", method, endpoint, e)
        return None


async def _catalog() -> dict | None:
    return await _api_call("GET", "/api/catalog")


# ── /start, /help, /cancel ────────────────────────────────

@router.message(Command("start"))
async def cmd_start(message: Message, state: FSMContext):
    await state.clear()
    await message.answer(WELCOME, reply_markup=main_menu_keyboard())


@router.message(Command("help"))
async def cmd_help(message: Message):
    await message.answer(HELP, reply_markup=main_menu_keyboard())


@router.callback_query(F.data == "help")
async def show_help(callback: CallbackQuery):
    await callback.answer()
    await safe_edit(callback, HELP, reply_markup=main_menu_keyboard())


@router.message(Command("cancel"))
async def cmd_cancel(message: Message, state: FSMContext):
    await state.clear()
    await message.answer("Cancelled.", reply_markup=ReplyKeyboardRemove())
    await message.answer(WELCOME, reply_markup=main_menu_keyboard())


@router.message(Command("track"))
async def cmd_track(message: Message, state: FSMContext):
    await state.clear()
    await _ask_tracking_number(message, state)


@router.callback_query(F.data == "back_to_menu")
async def back_to_menu(callback: CallbackQuery, state: FSMContext):
    await state.clear()
    await callback.answer()
    await safe_edit(callback, WELCOME, reply_markup=main_menu_keyboard())


# ── Route form: From ──────────────────────────────────────

@router.callback_query(F.data == "order_delivery")
async def start_order(callback: CallbackQuery, state: FSMContext):
    """Start (or restart) the route form."""
    await callback.answer()
    await state.set_state(OrderFlow.waiting_from)
    await callback.message.answer(
        f"{RULE}\n"
        "📦 <b>New Delivery</b>\n"
        f"{RULE}\n\n"
        "📍 Where do we pick the parcel up?\n\n"
        "• Type the address, or\n"
        "• Tap the button to use your location",
        reply_markup=location_keyboard(),
    )


async def _ask_to(message: Message, state: FSMContext, from_address: str):
    await state.update_data(from_address=from_address, suggestions=[])
    await state.set_state(OrderFlow.waiting_to)
    await message.answer(
        format_pickup_confirmed(from_address),
        reply_markup=ReplyKeyboardRemove(),
    )


@router.message(OrderFlow.waiting_from, F.location)
async def receive_from_location(message: Message, state: FSMContext):
    """Prefill 'from' with the nearest address to the shared location."""
    lat, lng = message.location.latitude, message.location.longitude
    result = await _api_call("GET", "/api/geo/reverse", params={"lat": lat, "lng": lng})
    address = (result or {}).get("address") or f"{lat},{lng}"
    await _ask_to(message, state, address)


async def _offer_suggestions(message: Message, state: FSMContext, typed: str, prefix: str) -> bool:
    result = await _api_call("GET", "/api/geo/suggest", params={"text": typed})
    suggestions = (result or {}).get("suggestions") or []
    if not suggestions:
        return False
    await state.update_data(typed=typed, suggestions=suggestions)
    await message.answer(
        "🔎 Did you mean one of these?",
        reply_markup=suggestions_keyboard(suggestions, prefix),
    )
    return True


def _picked_address(callback: CallbackQuery, data: dict) -> str | None:
    choice = callback.data.split("_", 1)[1]
    if choice == "keep":
        return data.get("typed")
    suggestions = data.get("suggestions") or []
    try:
        return suggestions[int(choice)]
    except (ValueError, IndexError):
        return None


@router.message(OrderFlow.waiting_from, F.text)
async def receive_from_text(message: Message, state: FSMContext):
    typed = message.text.strip()
    if not typed:
        return
    if not await _offer_suggestions(message, state, typed, "from"):
        await _ask_to(message, state, typed)


@router.callback_query(F.data.startswith("from_"), OrderFlow.waiting_from)
async def pick_from_suggestion(callback: CallbackQuery, state: FSMContext):
    await callback.answer()
    address = _picked_address(callback, await state.get_data())
    if not address:
        await callback.message.answer("Please type the pickup address again.")
        return
    await _ask_to(callback.message, state, address)


# ── Route form: To ────────────────────────────────────────

async def _ask_size(message: Message, state: FSMContext, to_address: str):
    catalog = await _catalog()
    if not catalog:
        await message.answer(API_UNREACHABLE, reply_markup=main_menu_keyboard())
        await state.clear()
        return
    await state.update_data(to_address=to_address, suggestions=[], catalog=catalog)
    await state.set_state(OrderFlow.waiting_size)
    await message.answer(
        format_dropoff_confirmed(to_address),
        reply_markup=size_keyboard(catalog["sizes"]),
    )


@router.message(OrderFlow.waiting_to, F.text)
async def receive_to_text(message: Message, state: FSMContext):
    typed = message.text.strip()
    if not typed:
        return
    if not await _offer_suggestions(message, state, typed, "to"):
        await _ask_size(message, state, typed)


@router.callback_query(F.data.startswith("to_"), OrderFlow.waiting_to)
async def pick_to_suggestion(callback: CallbackQuery, state: FSMContext):
    await callback.answer()
    address = _picked_address(callback, await state.get_data())
    if not address:
        await callback.message.answer("Please type the drop-off address again.")
        return
    await _ask_size(callback.message, state, address)


# ── Route form: Size & Speed ──────────────────────────────

@router.callback_query(F.data.startswith("size_"), OrderFlow.waiting_size)
async def receive_size(callback: CallbackQuery, state: FSMContext):
    await callback.answer()
    await state.update_data(size=callback.data.replace("size_", "", 1))
    data = await state.get_data()
    await state.set_state(OrderFlow.waiting_speed)
    await safe_edit(
        callback,
        "🚚 <b>How fast should it arrive?</b>\n\n"
        "<i>Fast delivery costs 15% more and takes about 30% less time.</i>",
        reply_markup=speed_keyboard(data["catalog"]["speeds"]),
    )


async def _calculate(callback: CallbackQuery, state: FSMContext):
    """POST the route form and show the resulting quote or the failure."""
    data = await state.get_data()
    result = await _api_call(
        "POST", "/api/quote",
        session_id=callback.from_user.id,
        json={
            "from": data.get("from_address", ""),
            "to": data.get("to_address", ""),
            "size": data.get("size", ""),
            "speed": data.get("speed", ""),
        },
    )
    if result is None:
        await safe_edit(callback, API_UNREACHABLE, reply_markup=retry_keyboard())
        return

    quote = result.get("quote")
    if not quote:
        text = format_toasts(result.get("toasts")) or "❌ Could not calculate the price."
        await safe_edit(callback, text, reply_markup=retry_keyboard())
        return

    await state.set_state(OrderFlow.quote_ready)
    await safe_edit(callback, format_quote(quote), reply_markup=quote_keyboard())


@router.callback_query(F.data.startswith("speed_"), OrderFlow.waiting_speed)
async def receive_speed(callback: CallbackQuery, state: FSMContext):
    await callback.answer("Calculating...")
    await state.update_data(speed=callback.data.replace("speed_", "", 1))
    await _calculate(callback, state)


@router.callback_query(F.data == "recalculate")
async def recalculate(callback: CallbackQuery, state: FSMContext):
    await callback.answer("Calculating...")
    await _calculate(callback, state)


# ── Order form ────────────────────────────────────────────

@router.callback_query(F.data == "place_order", OrderFlow.quote_ready)
async def place_order(callback: CallbackQuery, state: FSMContext):
    await callback.answer()
    await state.set_state(OrderFlow.waiting_name)
    await callback.message.answer("👤 <b>Your name?</b>")


@router.message(OrderFlow.waiting_name, F.text)
async def receive_name(message: Message, state: FSMContext):
    name = message.text.strip()
    if not name:
        await message.answer("Please type your name.")
        return
    await state.update_data(name=name)
    await state.set_state(OrderFlow.waiting_phone)
    await message.answer(
        "📱 <b>Your phone number?</b>\nType it or share your contact.",
        reply_markup=contact_keyboard(),
    )


@router.message(OrderFlow.waiting_phone, F.contact | F.text)
async def receive_phone(message: Message, state: FSMContext):
    phone = message.contact.phone_number if message.contact else message.text.strip()
    if not phone:
        await message.answer("Please type your phone number.")
        return
    await state.update_data(phone=phone)
    await state.set_state(OrderFlow.waiting_comment)
    await message.answer(
        "💬 Any comment for the courier?\nType it, or send /skip.",
        reply_markup=ReplyKeyboardRemove(),
    )


@router.message(OrderFlow.waiting_comment, F.text)
async def receive_comment(message: Message, state: FSMContext):
    comment = "" if message.text.strip().lower() == "/skip" else message.text
    data = await state.get_data()

    result = await _api_call(
        "POST", "/api/orders",
        session_id=message.from_user.id,
        json={"name": data.get("name"), "phone": data.get("phone"), "comment": comment},
    )
    if result is None:
        await message.answer(API_UNREACHABLE, reply_markup=quote_keyboard())
        await state.set_state(OrderFlow.quote_ready)
        return

    toasts = format_toasts(result.get("toasts"))
    if result.get("order_id") is None:
        await message.answer(toasts or "❌ The order was not placed.", reply_markup=quote_keyboard())
        await state.set_state(OrderFlow.quote_ready)
        return

    await state.clear()
    await message.answer(
        format_order_placed(result["order_id"]),
        reply_markup=main_menu_keyboard(),
    )


# ── Tracking ──────────────────────────────────────────────

async def _ask_tracking_number(message: Message, state: FSMContext):
    await state.set_state(TrackFlow.waiting_number)
    await message.answer("📍 Send the <b>shipment number</b>:")


@router.callback_query(F.data == "track_shipment")
async def start_tracking(callback: CallbackQuery, state: FSMContext):
    await callback.answer()
    await _ask_tracking_number(callback.message, state)


@router.message(TrackFlow.waiting_number, F.text)
async def receive_tracking_number(message: Message, state: FSMContext):
    result = await _api_call("GET", "/api/track", params={"number": message.text})
    if result is None:
        await message.answer(API_UNREACHABLE, reply_markup=main_menu_keyboard())
        await state.clear()
        return

    info = result.get("info")
    if not info:
        # stay in the flow so the user can retype the number
        await message.answer(format_toasts(result.get("toasts")) or "❌ Shipment not found.")
        return

    await state.clear()
    await message.answer(format_tracking(info), reply_markup=main_menu_keyboard())


# ── Fallback: show main menu without /start ────────────────

@router.message(StateFilter(None))
async def fallback_main_menu(message: Message, state: FSMContext):
    """When not in a flow, any message opens the main menu."""
    await message.answer(WELCOME, reply_markup=main_menu_keyboard())
