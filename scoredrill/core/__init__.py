"""Pure scheduling algorithms."""
