# Supabase tables: quiz_questions, quiz_attempts
# This file documents the expected database schema

"""
Expected Supabase table structure:

quiz_questions:
- id: uuid (primary key)
- set_id: uuid (foreign key to quiz_sets.id, on delete cascade)
- prompt: text (not null)
- choices: jsonb (array of 2 to 6 strings)
- correct_index: integer (0-based index into choices)
- explanation: text (nullable)
- position: integer (0..n-1 within the set)

quiz_attempts:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id)
- set_id: uuid (foreign key to quiz_sets.id, on delete cascade)
- score: integer
- total: integer
- duration_seconds: integer (nullable)
- created_at: timestamp (default: now())
"""
