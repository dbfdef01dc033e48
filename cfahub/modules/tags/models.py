# Supabase tables: tags, document_tags, flashcard_set_tags, quiz_set_tags
# This file documents the expected database schema

"""
Expected Supabase table structure:

tags:
- id: uuid (primary key)
- name: text (not null)
- color: text (not null, default: '#6b7280')
- owner_id: uuid (foreign key to auth.users.id, not null)
- created_at: timestamp (default: now())

document_tags:     document_id uuid, tag_id uuid   (unique pair)
flashcard_set_tags: set_id uuid, tag_id uuid       (unique pair)
quiz_set_tags:     quiz_set_id uuid, tag_id uuid   (unique pair)

The item column differs per content type; see config.content_config.
"""
