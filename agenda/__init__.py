"""Calendar core: event store, month grid, editor and voice reminders."""
