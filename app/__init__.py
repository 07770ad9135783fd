"""Vaccination Registry client: session store and record access over Supabase."""
