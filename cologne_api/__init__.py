"""API de checkout Cologne Ologist: Stripe Checkout + Supabase."""

__version__ = "1.0.0"
