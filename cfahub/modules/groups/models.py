# Supabase tables: study_groups, group_memberships, profiles.active_group_id
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

study_groups:
- id: uuid (primary key)
- name: text (not null)
- invite_code: text (not null, unique) - shared out-of-band to let people join
- created_at: timestamp (default: now())

group_memberships:
- user_id: uuid (foreign key to auth.users.id, not null)
- group_id: uuid (foreign key to study_groups.id, not null)
- created_at: timestamp (default: now())
- unique constraint on (user_id, group_id)

RPCs (security definer, they generate the invite code / bypass membership RLS):
- create_group(group_name text) -> study_groups row, caller added as member
- join_group(invite text) -> study_groups row, caller added as member
"""
