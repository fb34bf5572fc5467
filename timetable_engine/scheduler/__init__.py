from .cancel import CancelToken
from .fill import blocked_slots, fill_schedule
from .seed import seed_breaks

__all__ = ["CancelToken", "blocked_slots", "fill_schedule", "seed_breaks"]
