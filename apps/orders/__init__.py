"""Orders: pricing, availability blocks and the order lifecycle."""
