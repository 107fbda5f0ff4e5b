"""Story AI: turn-based interactive fiction over a text-completion backend."""
