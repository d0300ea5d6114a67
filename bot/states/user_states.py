"""FSM states for the customer bot flows."""

from aiogram.fsm.state import StatesGroup, State


class OrderFlow(StatesGroup):
    """Route form → quote → order form."""
    waiting_from = State()
    waiting_to = State()
    waiting_size = State()
    waiting_speed = State()
    quote_ready = State()
    waiting_name = State()
    waiting_phone = State()
    waiting_comment = State()


class TrackFlow(StatesGroup):
    """Shipment lookup."""
    waiting_number = State()
