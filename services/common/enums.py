from enum import Enum


class ListingStatus(str, Enum):
    active = "active"
    inactive = "inactive"
    pending = "pending"
    rejected = "rejected"


class PriceRange(str, Enum):
    free = "free"
    low = "low"
    medium = "medium"
    high = "high"


class MatchType(str, Enum):
    exact_address = "exact_address"
    proximity_title = "proximity_title"
    contact_info = "contact_info"
    fuzzy_location = "fuzzy_location"


class SearchType(str, Enum):
    keyword = "keyword"
    semantic = "semantic"
    hybrid = "hybrid"


class ResultSource(str, Enum):
    semantic = "semantic"
    keyword = "keyword"


class InteractionType(str, Enum):
    view = "view"
    favorite = "favorite"
    unfavorite = "unfavorite"
    contact = "contact"
    share = "share"


class SortField(str, Enum):
    relevance = "relevance"
    created_at = "created_at"
    views = "views"
    favorites = "favorites"


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"
