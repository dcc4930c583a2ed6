"""
Column constraints and reference data shared by models, validation and services.
"""

DISH_NAME_MAX_LENGTH = 255
DISH_LOCATION_MAX_LENGTH = 255

MEAL_HISTORY_NOTES_MAX_LENGTH = 1000

SOURCE_NAME_MAX_LENGTH = 255
SOURCE_DESCRIPTION_MAX_LENGTH = 1000
SOURCE_URL_MAX_LENGTH = 500

TAG_NAME_MAX_LENGTH = 100
TAG_DESCRIPTION_MAX_LENGTH = 500

KNOWN_CUISINES = (
    "Italian",
    "Mexican",
    "American",
    "Asian",
    "Mediterranean",
    "Indian",
    "French",
    "Greek",
    "Thai",
    "Japanese",
    "Chinese",
    "Korean",
    "Middle Eastern",
    "Vietnamese",
    "Spanish",
    "Caribbean",
    "German",
    "British",
    "Fusion",
    "Other",
)

DEFAULT_CUISINE = "Other"

# Legacy source type values that are stored as books
LEGACY_BOOK_SOURCE_TYPES = frozenset({"document"})

# Colors given to cuisine tags created from dish cuisines
CUISINE_TAG_COLORS = {
    "Italian": "bg-red-50 text-red-700 border-red-200",
    "Mexican": "bg-green-50 text-green-700 border-green-200",
    "American": "bg-blue-50 text-blue-700 border-blue-200",
    "Asian": "bg-purple-50 text-purple-700 border-purple-200",
    "Mediterranean": "bg-cyan-50 text-cyan-700 border-cyan-200",
    "Indian": "bg-orange-50 text-orange-700 border-orange-200",
    "French": "bg-indigo-50 text-indigo-700 border-indigo-200",
    "Greek": "bg-sky-50 text-sky-700 border-sky-200",
    "Thai": "bg-lime-50 text-lime-700 border-lime-200",
    "Japanese": "bg-pink-50 text-pink-700 border-pink-200",
    "Chinese": "bg-red-50 text-red-700 border-red-200",
    "Korean": "bg-violet-50 text-violet-700 border-violet-200",
    "Middle Eastern": "bg-amber-50 text-amber-700 border-amber-200",
    "Vietnamese": "bg-emerald-50 text-emerald-700 border-emerald-200",
    "Spanish": "bg-yellow-50 text-yellow-700 border-yellow-200",
    "Caribbean": "bg-teal-50 text-teal-700 border-teal-200",
    "German": "bg-gray-50 text-gray-700 border-gray-200",
    "British": "bg-slate-50 text-slate-700 border-slate-200",
    "Fusion": "bg-fuchsia-50 text-fuchsia-700 border-fuchsia-200",
    "Other": "bg-stone-50 text-stone-700 border-stone-200",
}
DEFAULT_TAG_COLOR = "bg-gray-100 text-gray-800 border-gray-200"
