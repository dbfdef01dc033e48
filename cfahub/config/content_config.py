"""
Content Types Configuration
This config defines, for every shareable content type, the tables and columns
that back it in Supabase. Services, routers and maintenance scripts read the
same matrix so a content type is described in exactly one place.
"""

from typing import Dict, List

# Define content types and their storage layout
CONTENT_TYPES = {
    "documents": {
        "base_table": "documents",
        "share_table": "document_shares",
        "share_fk": "document_id",
        "tag_table": "document_tags",
        "tag_fk": "document_id",
        "folder_kind": "documents",
        "prefix": "/documents",
        "extra_columns": ["external_url", "preview_url"],
        "description": "PDF link library"
    },
    "flashcards": {
        "base_table": "flashcard_sets",
        "share_table": "flashcard_set_shares",
        "share_fk": "set_id",
        "tag_table": "flashcard_set_tags",
        "tag_fk": "set_id",
        "folder_kind": "flashcards",
        "prefix": "/flashcard-sets",
        "extra_columns": [],
        "description": "Flashcard sets"
    },
    "quizzes": {
        "base_table": "quiz_sets",
        "share_table": "quiz_set_shares",
        "share_fk": "set_id",
        "tag_table": "quiz_set_tags",
        "tag_fk": "quiz_set_id",
        "folder_kind": "quizzes",
        "prefix": "/quiz-sets",
        "extra_columns": [],
        "description": "Multiple-choice quiz sets"
    }
}

# Columns every content row carries
BASE_COLUMNS = ["id", "title", "owner_id", "visibility", "folder_id", "group_id", "created_at"]

# UI labels the API returns alongside listings
LABELS = {
    "fr": {
        "root": "Sans dossier",
        "private": "Privés",
        "shared": "Groupes",
        "public": "Publics",
        "select_group": "Sélectionne au moins un groupe.",
        "title_required": "Le titre est obligatoire.",
        "invalid_url": "URL invalide.",
        "not_found": "Introuvable.",
        "prompt_required": "La question est obligatoire.",
        "choices_range": "Entre 2 et 6 choix.",
        "no_questions": "Aucune question.",
        "no_selection": "Choisis une réponse.",
        "too_many_answers": "Plus de réponses que de questions.",
        "card_required": "Recto et verso sont obligatoires.",
        "tsv_empty": "Rien à importer.",
        "tsv_missing_tab": "Ligne {line} : il manque une tabulation.",
        "import_question_invalid": "Question {number} invalide.",
    },
    "en": {
        "root": "No folder",
        "private": "Private",
        "shared": "Groups",
        "public": "Public",
        "select_group": "Select at least one group.",
        "title_required": "Title is required.",
        "invalid_url": "Invalid URL.",
        "not_found": "Not found.",
        "prompt_required": "Question is required.",
        "choices_range": "Between 2 and 6 choices.",
        "no_questions": "No questions.",
        "no_selection": "Pick an answer.",
        "too_many_answers": "More answers than questions.",
        "card_required": "Front and back are required.",
        "tsv_empty": "Nothing to import.",
        "tsv_missing_tab": "Line {line} needs a TAB.",
        "import_question_invalid": "Question {number} is invalid.",
    },
}


def get_content_config(content_type: str) -> Dict:
    """Return the storage layout of a content type, raising KeyError when unknown."""
    return CONTENT_TYPES[content_type]


def select_columns(content_type: str) -> str:
    """Comma-separated column list for selecting a content row"""
    cols: List[str] = BASE_COLUMNS + CONTENT_TYPES[content_type]["extra_columns"]
    return ",".join(cols)


def label(locale: str, key: str) -> str:
    """Look up a UI label, falling back to the default locale and then the key itself."""
    from cfahub.config import settings

    table = LABELS.get(locale) or LABELS[settings.default_locale]
    return table.get(key) or LABELS[settings.default_locale].get(key) or key
