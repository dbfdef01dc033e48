# Supabase Auth
# Sign-in (OAuth / magic link / password) happens in the frontend against
# Supabase Auth directly. This API only receives the resulting access token.

"""
Supabase Auth provides:
- auth.get_user(jwt) - Resolve a bearer token to its user

The per-user preference row lives in `profiles`:
- id: uuid (primary key, = auth.users.id)
- active_group_id: uuid (nullable, foreign key to study_groups.id)
"""
