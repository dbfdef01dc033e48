# Supabase tables: documents, flashcard_sets, quiz_sets and their *_shares tables
# This file documents the expected database schema

"""
Expected Supabase table structure (one base table per content type, same
shape, see config.content_config.CONTENT_TYPES):

documents / flashcard_sets / quiz_sets:
- id: uuid (primary key)
- title: text (not null)
- owner_id: uuid (foreign key to auth.users.id, not null)
- visibility: text (nullable; 'private' | 'public' | 'group' | 'groups')
- folder_id: uuid (foreign key to library_folders.id, nullable)
- group_id: uuid (legacy single-group share, nullable, never written by the API
  except to clear it)
- created_at: timestamp (default: now())
documents only:
- external_url: text (not null, http/https)
- preview_url: text (nullable)

document_shares:      document_id uuid, group_id uuid   (unique pair)
flashcard_set_shares: set_id uuid, group_id uuid        (unique pair)
quiz_set_shares:      set_id uuid, group_id uuid        (unique pair)

Share rows only exist while the item's visibility is 'group' or 'groups'.
Cascading deletes of shares, tag links, cards and questions are configured
on the foreign keys.
"""
