# Supabase table: library_folders
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- name: text (not null)
- parent_id: uuid (nullable, foreign key to library_folders.id) - forms a tree
- kind: text (not null) - values: documents, flashcards, quizzes
- owner_id: uuid (foreign key to auth.users.id, not null)
- created_at: timestamp (default: now())

RLS scopes rows to their owner. Content rows reference a folder through
their own folder_id column.
"""
