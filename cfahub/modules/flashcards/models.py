# Supabase table: flashcards
# This file documents the expected database schema

"""
Expected Supabase table structure:

flashcards:
- id: uuid (primary key)
- set_id: uuid (foreign key to flashcard_sets.id, on delete cascade)
- front: text (not null)
- back: text (not null)
- position: integer (1-based, append order)
- created_at: timestamp (default: now())
"""
