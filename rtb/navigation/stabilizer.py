"""Anti-flicker expansion flag.

While the user moves between pages of the section that is already open, the
rendered open/closed value is frozen; any other transition adopts the fresh
value. Called once per section per route change.
"""


def stabilize(is_active_now: bool, raw_expanded_now: bool,
              was_active_last: bool, stable_prev: bool) -> bool:
    if was_active_last and is_active_now and raw_expanded_now:
        return stable_prev
    return raw_expanded_now
