"""
Canonical static tables for intent classification, ranking, linking and offline routing.

Every table lives here once and is exposed through a single frozen, versioned
KnowledgeTables value. Bump TABLES_VERSION whenever a table changes so logs and
the health endpoint show which revision served a request.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping, Tuple

from doc_assistant.services.assistant.types import Intent, base_url

TABLES_VERSION = "doc-tables-2024.12"


@dataclass(frozen=True)
class RouteLink:
    title: str
    url: str
    category: str


@dataclass(frozen=True)
class FallbackRoute:
    """Static keyword → page mapping used when live search/generation is unavailable."""

    keywords: Tuple[str, ...]
    url: str
    title: str
    category: str
    related: Tuple[RouteLink, ...] = ()
    # API reference pages; first-time API questions routed here get the auth reminder
    detail: bool = False


@dataclass(frozen=True)
class ApiEndpoint:
    """One API operation and the documentation section that describes it."""

    method: str
    path: str
    summary: str
    description: str
    category: str
    doc_page: str
    tags: Tuple[str, ...] = ()
    required_fields: Tuple[str, ...] = ()
    path_params: Tuple[str, ...] = ()
    requires_auth: bool = True

    @property
    def key(self) -> str:
        return f"{self.method}:{self.path}"


@dataclass(frozen=True)
class CatalogEntry:
    """Taxonomy metadata for one documentation page (companion search)."""

    path: str
    title: str
    category: str
    topic: str
    complexity: str
    keywords: Tuple[str, ...]


# ---------------------------------------------------------------------------
# Search term extraction
# ---------------------------------------------------------------------------
STOP_WORDS = frozenset({
    "a", "an", "the", "how", "do", "does", "did", "i", "me", "my", "we", "our",
    "you", "your", "can", "could", "would", "should", "will", "to", "of", "in",
    "on", "for", "with", "is", "are", "was", "be", "been", "what", "which",
    "where", "when", "who", "it", "its", "this", "that", "these", "those",
    "and", "or", "via", "using", "use", "please", "there", "any", "some",
    "about", "from", "into", "by", "at", "as", "need", "want", "way", "tell",
    "help", "im", "if", "so", "then", "just",
})

# Insertion order is irrelevant: the first matching query token wins
ENTITY_EXPANSIONS = {
    "campaign": "campaign api",
    "campaigns": "campaign api",
    "creative": "creative api",
    "creatives": "creative api",
    "audience": "audience api",
    "audiences": "audience api",
    "report": "reports api",
    "reports": "reports api",
    "reporting": "reports api",
    "conversion": "conversion api",
    "conversions": "conversion api",
    "inventory": "inventory api",
    "deal": "inventory deals",
    "deals": "inventory deals",
    "pmp": "private marketplace deals",
    "bid": "bid model",
    "auth": "authentication",
    "oauth": "oauth authentication",
    "token": "authentication token",
    "login": "authentication login",
    "dashboard": "dashboard api",
    "finance": "finance api",
    "billing": "finance api billing",
    "insights": "insights api",
    "asset": "asset api",
    "assets": "asset api",
    "workspace": "workspace api",
    "pagination": "api pagination",
}

# ---------------------------------------------------------------------------
# Intent classification (ordered rule vocabularies, matched on word boundaries)
# ---------------------------------------------------------------------------
SPECIAL_MARKERS = (
    "political", "election", "healthcare", "pharma", "pharmaceutical", "hipaa",
    "medical", "migrate", "migrating", "migration", "dv360", "xandr",
    "appnexus", "trade desk", "beeswax",
)
CREATE_VERBS = (
    "create", "add", "new", "launch", "upload", "set up", "setup", "build",
    "make", "generate", "register", "submit",
)
UPDATE_VERBS = (
    "update", "edit", "modify", "change", "patch", "delete", "remove", "pause",
    "resume", "archive", "rename", "cancel",
)
GET_VERBS = (
    "get", "list", "fetch", "retrieve", "find", "show", "download", "view",
    "search", "look up", "lookup", "export",
)
CONCEPTUAL_MARKERS = (
    "what is", "what are", "what's", "whats", "explain", "overview",
    "difference", "differences", "why", "how does", "understand", "concept",
    "concepts", "introduction", "meaning", "versus", "vs",
)

# ---------------------------------------------------------------------------
# Relevance reranking
# ---------------------------------------------------------------------------
BASE_SCORE = 100

CATEGORY_PRIORITY = {
    (Intent.CREATE, "quickstart"): 100,
    (Intent.CREATE, "tutorials"): 60,
    (Intent.CREATE, "guidelines"): 50,
    (Intent.CREATE, "reference"): 50,
    (Intent.UPDATE, "guidelines"): 100,
    (Intent.UPDATE, "reference"): 40,
    (Intent.UPDATE, "tutorials"): 20,
    (Intent.GET, "guidelines"): 100,
    (Intent.GET, "reference"): 50,
    (Intent.GET, "quickstart"): 20,
    (Intent.CONCEPTUAL, "Getting Started"): 100,
    (Intent.CONCEPTUAL, "reference"): 80,
    (Intent.CONCEPTUAL, "guidelines"): 40,
    (Intent.CONCEPTUAL, "tutorials"): 30,
    (Intent.CONCEPTUAL, "quickstart"): 20,
    (Intent.SPECIFIC, "political"): 100,
    (Intent.SPECIFIC, "healthcare"): 100,
    (Intent.SPECIFIC, "migration"): 100,
}

# (intent, path fragment, boost)
PATH_BOOSTS = (
    (Intent.CREATE, "/quickstart-guides/", 100),
    (Intent.CREATE, "/tutorials/", 60),
)

ADVANCED_MARKERS = (
    "advanced", "pg-campaign", "programmatic guaranteed",
    "programmatic-guaranteed", "legacy", "deprecated",
)
ADVANCED_PENALTY = -30

LOW_PRIORITY_CATEGORIES = frozenset({"political", "healthcare", "migration"})
LOW_PRIORITY_PENALTY = -50

ANCHOR_BOOST = 20
LEAF_DEPTH = 2

# ---------------------------------------------------------------------------
# Link building
# ---------------------------------------------------------------------------
GUIDED_CATEGORIES = frozenset({"quickstart", "tutorials"})
REFERENCE_LABEL = "guidelines"

# Substring of a quickstart/tutorial path → the single reference page it pairs with.
# Scanned in order; first hit wins.
REFERENCE_CORRESPONDENCE = (
    ("create-a-campaign-quickstart", RouteLink("Campaign API", "/guidelines/campaign-api/", "guidelines")),
    ("upload-a-creative-quickstart", RouteLink("Creative API", "/guidelines/creative-api/", "guidelines")),
    ("schedule-report-api-quickstart", RouteLink("Reports API", "/guidelines/reports-api/", "guidelines")),
    ("reporting-api-quickstart", RouteLink("Reports API", "/guidelines/reports-api/", "guidelines")),
    ("matched-audience-upload", RouteLink("Audience API", "/guidelines/audience-api/", "guidelines")),
    ("contextual-audience-quickstart", RouteLink("Audience API", "/guidelines/audience-api/", "guidelines")),
    ("conversion-quickstart", RouteLink("Conversion API", "/guidelines/conversion-api/", "guidelines")),
    ("inventory-quickstart", RouteLink("Inventory API", "/guidelines/inventory-api/", "guidelines")),
    ("bid-model-quickstart", RouteLink("Bid Model API", "/guidelines/bid-model-api/", "guidelines")),
    ("insights-quickstart", RouteLink("Insights API", "/guidelines/insights-api/", "guidelines")),
    ("authentication-quickstart", RouteLink("User API", "/guidelines/user-api/", "guidelines")),
    ("/tutorials/customer-guide", RouteLink("User API", "/guidelines/user-api/", "guidelines")),
    ("/tutorials/deal-guide", RouteLink("Inventory API", "/guidelines/inventory-api/", "guidelines")),
)

RELATED_BUCKET_LIMIT = 3

CATEGORY_DISPLAY_NAMES = {
    "quickstart": "Quickstart Guides",
    "guidelines": "API Guidelines",
    "tutorials": "Tutorials",
    "reference": "Reference",
    "migration": "Migration Guides",
    "political": "Political Advertising",
    "healthcare": "Healthcare Advertising",
}

VALID_DOC_PREFIXES = (
    "/getting-started/",
    "/guidelines/",
    "/quickstart-guides/",
    "/tutorials/",
    "/migration-guides/",
    "/political-vertical/",
    "/healthcare-vertical/",
)

# ---------------------------------------------------------------------------
# Offline fallback routing
# ---------------------------------------------------------------------------
AUTH_PATTERN = (
    r"\b(?:auth|authenticate|authentication|authorization|login|log in|sign in|"
    r"oauth|bearer|token|access token|refresh token|api key)\b"
)

AUTH_ROUTE = FallbackRoute(
    keywords=("auth",),
    url="/quickstart-guides/authentication-quickstart-guide/",
    title="Authentication",
    category="quickstart",
    related=(
        RouteLink("User API", "/guidelines/user-api/", "guidelines"),
        RouteLink("Before You Begin", "/getting-started/before-you-begin/", "reference"),
    ),
)

_CAMPAIGN_API = RouteLink("Campaign API", "/guidelines/campaign-api/", "guidelines")
_REPORTS_API = RouteLink("Reports API", "/guidelines/reports-api/", "guidelines")
_AUDIENCE_API = RouteLink("Audience API", "/guidelines/audience-api/", "guidelines")

FALLBACK_ROUTES = (
    FallbackRoute(
        keywords=("getting started", "before you begin", "begin", "introduction", "prerequisite", "start"),
        url="/getting-started/before-you-begin/",
        title="Before You Begin",
        category="reference",
        related=(
            RouteLink("Platform Overview", "/getting-started/platform-overview/", "reference"),
            RouteLink("REST API Reference", "/getting-started/rest-api-reference/", "reference"),
        ),
    ),
    FallbackRoute(
        keywords=("campaign", "create campaign", "ad campaign", "launch campaign", "new campaign"),
        url="/quickstart-guides/create-a-campaign-quickstart/",
        title="Create a Campaign",
        category="quickstart",
        related=(_CAMPAIGN_API,),
    ),
    FallbackRoute(
        keywords=("campaign status", "pause campaign", "resume campaign", "campaign state"),
        url="/guidelines/campaign-api/#update-campaign-status",
        title="Update Campaign Status",
        category="guidelines",
        related=(
            RouteLink("Create a Campaign", "/quickstart-guides/create-a-campaign-quickstart/", "quickstart"),
            RouteLink("Dashboard API", "/guidelines/dashboard-api/", "guidelines"),
        ),
    ),
    FallbackRoute(
        keywords=("campaign budget", "update budget", "daily budget", "budget cap"),
        url="/guidelines/campaign-api/#update-campaign-budget",
        title="Update Campaign Budget",
        category="guidelines",
        related=(
            RouteLink("Finance API", "/guidelines/finance-api/", "guidelines"),
            RouteLink("Bid Model API", "/guidelines/bid-model-api/", "guidelines"),
        ),
    ),
    FallbackRoute(
        keywords=("creative", "upload creative", "ad creative", "banner", "video ad", "native ad", "html5"),
        url="/quickstart-guides/upload-a-creative-quickstart/",
        title="Upload a Creative",
        category="quickstart",
        related=(
            RouteLink("Creative API", "/guidelines/creative-api/", "guidelines"),
            RouteLink("Asset API", "/guidelines/asset-api/", "guidelines"),
        ),
    ),
    FallbackRoute(
        keywords=("report", "reporting", "metrics", "performance", "stats"),
        url="/quickstart-guides/reporting-api-quickstart-guide/",
        title="Reporting API",
        category="quickstart",
        related=(_REPORTS_API,),
    ),
    FallbackRoute(
        keywords=("schedule", "scheduled report", "recurring", "email report"),
        url="/quickstart-guides/schedule-report-api-quickstart-guide/",
        title="Scheduled Reports",
        category="quickstart",
        related=(_REPORTS_API,),
    ),
    FallbackRoute(
        keywords=("conversion", "tracking", "pixel", "attribution", "postback"),
        url="/quickstart-guides/conversion-quickstart/",
        title="Conversion Tracking",
        category="quickstart",
        related=(RouteLink("Conversion API", "/guidelines/conversion-api/", "guidelines"),),
    ),
    FallbackRoute(
        keywords=("inventory", "deals", "pmp", "private marketplace", "deal id"),
        url="/quickstart-guides/inventory-quickstart/",
        title="Inventory API",
        category="quickstart",
        related=(RouteLink("Inventory API Guide", "/guidelines/inventory-api/", "guidelines"),),
    ),
    FallbackRoute(
        keywords=("bid", "bidding", "bid model", "cpm", "cpc", "optimization"),
        url="/quickstart-guides/bid-model-quickstart/",
        title="Bid Model API",
        category="quickstart",
        related=(RouteLink("Bid Model API Guide", "/guidelines/bid-model-api/", "guidelines"),),
    ),
    FallbackRoute(
        keywords=("insights", "analytics", "breakdown"),
        url="/quickstart-guides/insights-quickstart/",
        title="Insights API",
        category="quickstart",
        related=(RouteLink("Insights API Guide", "/guidelines/insights-api/", "guidelines"),),
    ),
    FallbackRoute(
        keywords=("audience", "segment", "targeting", "matched audience", "first party"),
        url="/quickstart-guides/matched-audience-upload-api-quickstart-guide/",
        title="Matched Audience Upload",
        category="quickstart",
        related=(_AUDIENCE_API,),
    ),
    FallbackRoute(
        keywords=("asset", "upload asset", "media", "file upload", "image"),
        url="/guidelines/asset-api/",
        title="Asset API",
        category="guidelines",
        detail=True,
        related=(RouteLink("Creative API", "/guidelines/creative-api/", "guidelines"),),
    ),
    FallbackRoute(
        keywords=("dashboard", "summary", "home"),
        url="/guidelines/dashboard-api/",
        title="Dashboard API",
        category="guidelines",
        detail=True,
        related=(_REPORTS_API,),
    ),
    FallbackRoute(
        keywords=("user", "account", "organization", "workspace", "permissions"),
        url="/guidelines/user-api/",
        title="User API",
        category="guidelines",
        detail=True,
        related=(RouteLink("Workspace API", "/guidelines/workspace-api/", "guidelines"),),
    ),
    FallbackRoute(
        keywords=("finance", "billing", "invoice", "budget", "payment"),
        url="/guidelines/finance-api/",
        title="Finance API",
        category="guidelines",
        detail=True,
        related=(_CAMPAIGN_API,),
    ),
    FallbackRoute(
        keywords=("pagination", "paging", "page size", "offset"),
        url="/getting-started/api-pagination-guide/",
        title="API Pagination Guide",
        category="reference",
        related=(RouteLink("REST API Reference", "/getting-started/rest-api-reference/", "reference"),),
    ),
    FallbackRoute(
        keywords=("political", "political ads", "election"),
        url="/political-vertical/",
        title="Political Advertising",
        category="political",
        detail=True,
        related=(_CAMPAIGN_API,),
    ),
    FallbackRoute(
        keywords=("healthcare", "health", "pharma", "medical"),
        url="/healthcare-vertical/",
        title="Healthcare Advertising",
        category="healthcare",
        detail=True,
        related=(_CAMPAIGN_API,),
    ),
    FallbackRoute(
        keywords=("migrate", "migration", "switch", "dv360", "xandr", "trade desk", "beeswax"),
        url="/migration-guides/",
        title="Migration Guides",
        category="migration",
        detail=True,
        related=(RouteLink("Before You Begin", "/getting-started/before-you-begin/", "reference"),),
    ),
)

# Auth reminder on offline answers: only for a first question about API details
FOUNDATION_MARKERS = (
    "authenticate", "auth", "login", "token", "oauth", "setup", "start", "begin", "prerequisite", "require",
)
WORKFLOW_MARKERS = ("best practice", "recommend", "should i", "how to", "workflow", "process", "step")
FOLLOW_UP_MARKERS = ("my", "current", "already", "next", "then", "after")
API_DETAIL_MARKERS = ("endpoint", "api")

GENERIC_SUGGESTIONS = (
    RouteLink("Before You Begin", "/getting-started/before-you-begin/", "reference"),
    RouteLink("Authentication Guide", "/quickstart-guides/authentication-quickstart-guide/", "quickstart"),
    RouteLink("Create a Campaign", "/quickstart-guides/create-a-campaign-quickstart/", "quickstart"),
    RouteLink("Upload a Creative", "/quickstart-guides/upload-a-creative-quickstart/", "quickstart"),
    RouteLink("API Guidelines", "/guidelines/", "guidelines"),
)

# ---------------------------------------------------------------------------
# Response actions
# ---------------------------------------------------------------------------
API_HIGHLIGHT_TERMS = (
    "Authorization", "Bearer", "access_token", "refresh_token",
    "POST", "GET", "PUT", "DELETE", "PATCH",
    "campaignId", "creativeId", "organizationId", "workspaceId",
    "OAuth", "API key", "endpoint",
)

# ---------------------------------------------------------------------------
# API endpoint registry
# ---------------------------------------------------------------------------
API_ENDPOINTS = (
    ApiEndpoint(
        "POST", "/api/v3/campaign", "Create a new campaign",
        "Creates a new advertising campaign with specified targeting, budget, and creative settings.",
        "campaigns", "/guidelines/campaign-api/#create-a-campaign", ("campaign", "create"),
        ("campaignName", "advertiserId", "startDate", "endDate", "budgetTotal"),
    ),
    ApiEndpoint(
        "GET", "/api/v3/campaign/{id}", "Get campaign details",
        "Retrieves detailed information about a specific campaign including targeting, budget, and performance data.",
        "campaigns", "/guidelines/campaign-api/#get-campaign-details", ("campaign", "read", "details"),
        path_params=("id",),
    ),
    ApiEndpoint(
        "POST", "/api/v3/campaign/basic/list", "List campaigns with filters",
        "Retrieves a paginated list of campaigns with optional filtering by status, date range, and search terms.",
        "campaigns", "/guidelines/campaign-api/#get-campaign-list", ("campaign", "list", "search"),
    ),
    ApiEndpoint(
        "PATCH", "/api/v3/campaign/budget", "Update campaign budget",
        "Updates the total budget, daily budget, or max bid for one or more campaigns.",
        "campaigns", "/guidelines/campaign-api/#update-campaign-budget", ("campaign", "update", "budget"),
        ("campaignIds",),
    ),
    ApiEndpoint(
        "PUT", "/api/v3/campaign/status", "Update campaign status",
        "Changes the status of one or more campaigns (pause, resume, delete).",
        "campaigns", "/guidelines/campaign-api/#update-campaign-status", ("campaign", "update", "status"),
        ("campaignIds", "status"),
    ),
    ApiEndpoint(
        "POST", "/api/v3/ra/report/execute", "Execute a report",
        "Generates a report based on specified dimensions, metrics, and filters.",
        "reports", "/guidelines/reports-api/#execute-report", ("report", "execute", "analytics"),
        ("startDate", "endDate", "dimensions", "metrics"),
    ),
    ApiEndpoint(
        "POST", "/api/v3/ra/report/schedule", "Schedule a recurring report",
        "Creates a scheduled report that runs automatically at specified intervals.",
        "reports", "/guidelines/reports-api/#schedule-report", ("report", "schedule", "automation"),
        ("reportName", "startDate", "endDate", "dimensions", "metrics", "frequency"),
    ),
    ApiEndpoint(
        "POST", "/api/v2/audience/matched/add", "Upload a matched audience",
        "Creates a new matched audience by uploading hashed identifiers (emails, MAIDs, etc.).",
        "audiences", "/guidelines/audience-api/#upload-matched-audience", ("audience", "matched", "upload"),
    ),
    ApiEndpoint(
        "POST", "/api/v3/audience/contextual/create", "Create a contextual audience",
        "Creates a new contextual audience based on keywords, topics, or URL patterns.",
        "audiences", "/guidelines/audience-api/#create-contextual-audience", ("audience", "contextual", "create"),
        ("audienceName", "keywords"),
    ),
    ApiEndpoint(
        "POST", "/api/v2/audience/search", "Search and list audiences",
        "Retrieves a paginated list of audiences with optional filtering.",
        "audiences", "/guidelines/audience-api/#list-audiences", ("audience", "list", "search"),
    ),
    ApiEndpoint(
        "POST", "/api/v3/creative/add", "Upload a creative asset",
        "Uploads a new creative asset (image, video, HTML5, native, or audio).",
        "creatives", "/guidelines/creative-api/#upload-creative", ("creative", "upload", "asset"),
        ("creativeName", "creativeTypeId"),
    ),
    ApiEndpoint(
        "GET", "/api/v3/creative/{id}", "Get creative details",
        "Retrieves detailed information about a specific creative asset.",
        "creatives", "/guidelines/creative-api/#get-creative-details", ("creative", "read", "details"),
        path_params=("id",),
    ),
    ApiEndpoint(
        "POST", "/api/v2/creative/list", "List creative assets",
        "Retrieves a paginated list of creative assets with optional filtering.",
        "creatives", "/guidelines/creative-api/#list-creatives", ("creative", "list", "search"),
    ),
    ApiEndpoint(
        "POST", "/api/v3/conversion/add", "Create a conversion tracker",
        "Creates a new conversion tracking pixel or postback.",
        "conversions", "/guidelines/conversion-api/#create-conversion", ("conversion", "tracking", "create"),
        ("conversionName", "conversionTypeId"),
    ),
    ApiEndpoint(
        "GET", "/api/v3/conversion/{id}", "Get conversion details",
        "Retrieves detailed information about a conversion tracker.",
        "conversions", "/guidelines/conversion-api/#get-conversion-details", ("conversion", "read", "details"),
        path_params=("id",),
    ),
    ApiEndpoint(
        "POST", "/api/v2/inv/pmp/deal/list", "List PMP deals",
        "Retrieves a list of available Private Marketplace deals.",
        "inventory", "/guidelines/inventory-api/#list-pmp-deals", ("inventory", "pmp", "deals", "list"),
    ),
    ApiEndpoint(
        "POST", "/api/v3/inv/group/add", "Create inventory group",
        "Creates a new inventory group for organizing and targeting inventory.",
        "inventory", "/guidelines/inventory-api/#create-inventory-group", ("inventory", "group", "create"),
        ("groupName", "inventoryGroupTypeId"),
    ),
    ApiEndpoint(
        "POST", "/api/v2/rb/resultDashboard", "Get dashboard performance data",
        "Retrieves aggregated performance metrics for the dashboard view.",
        "dashboard", "/guidelines/dashboard-api/#get-dashboard-data", ("dashboard", "metrics", "performance"),
        ("dateRange",),
    ),
)

# ---------------------------------------------------------------------------
# Taxonomy catalog (companion search)
# ---------------------------------------------------------------------------
DOC_CATALOG = (
    CatalogEntry("/quickstart-guides/authentication-quickstart-guide/", "Authentication Quickstart", "quickstart", "user", "beginner",
                 ("auth", "login", "token", "oauth", "bearer", "api key", "authenticate", "access token", "refresh token")),
    CatalogEntry("/quickstart-guides/create-a-campaign-quickstart/", "Create a Campaign", "quickstart", "campaign", "beginner",
                 ("campaign", "create", "launch", "advertising", "ad campaign", "new campaign")),
    CatalogEntry("/quickstart-guides/upload-a-creative-quickstart/", "Upload a Creative", "quickstart", "creative", "beginner",
                 ("creative", "upload", "banner", "video", "native", "html5", "ad creative")),
    CatalogEntry("/quickstart-guides/reporting-api-quickstart-guide/", "Reporting API Quickstart", "quickstart", "reports", "beginner",
                 ("report", "reporting", "analytics", "metrics", "performance", "statistics")),
    CatalogEntry("/quickstart-guides/matched-audience-upload-api-quickstart-guide/", "Matched Audience Upload", "quickstart", "audience", "beginner",
                 ("audience", "segment", "matched", "first party", "upload audience", "customer list")),
    CatalogEntry("/quickstart-guides/conversion-quickstart/", "Conversion Tracking Quickstart", "quickstart", "conversion", "beginner",
                 ("conversion", "tracking", "pixel", "attribution", "postback", "goal")),
    CatalogEntry("/quickstart-guides/inventory-quickstart/", "Inventory API Quickstart", "quickstart", "inventory", "beginner",
                 ("inventory", "deals", "pmp", "private marketplace", "deal id", "supply")),
    CatalogEntry("/quickstart-guides/bid-model-quickstart/", "Bid Model Quickstart", "quickstart", "campaign", "intermediate",
                 ("bid", "bidding", "bid model", "cpm", "cpc", "optimization", "bid strategy")),
    CatalogEntry("/quickstart-guides/insights-quickstart/", "Insights API Quickstart", "quickstart", "reports", "beginner",
                 ("insights", "analytics", "data", "breakdown", "visualization")),
    CatalogEntry("/quickstart-guides/schedule-report-api-quickstart-guide/", "Schedule Report Quickstart", "quickstart", "reports", "intermediate",
                 ("schedule", "scheduled report", "recurring", "email report", "automation")),
    CatalogEntry("/quickstart-guides/contextual-audience-quickstart/", "Contextual Audience Quickstart", "quickstart", "audience", "beginner",
                 ("contextual", "audience", "targeting", "content", "category")),
    CatalogEntry("/guidelines/campaign-api/", "Campaign API Guide", "guidelines", "campaign", "intermediate",
                 ("campaign", "api", "create", "update", "delete", "campaign management", "endpoints")),
    CatalogEntry("/guidelines/creative-api/", "Creative API Guide", "guidelines", "creative", "intermediate",
                 ("creative", "api", "upload", "manage", "banner", "video", "native", "html5", "vast", "creative management")),
    CatalogEntry("/guidelines/audience-api/", "Audience API Guide", "guidelines", "audience", "intermediate",
                 ("audience", "segment", "targeting", "api", "upload", "manage", "audience management")),
    CatalogEntry("/guidelines/reports-api/", "Reports API Guide", "guidelines", "reports", "intermediate",
                 ("report", "api", "generate", "download", "reporting", "data export")),
    CatalogEntry("/guidelines/finance-api/", "Finance API Guide", "guidelines", "finance", "advanced",
                 ("finance", "billing", "budget", "payment", "invoice", "spending", "financial")),
    CatalogEntry("/guidelines/user-api/", "User API Guide", "guidelines", "user", "intermediate",
                 ("user", "account", "organization", "workspace", "permissions", "roles", "team")),
    CatalogEntry("/guidelines/dashboard-api/", "Dashboard API Guide", "guidelines", "reports", "intermediate",
                 ("dashboard", "overview", "summary", "home", "widgets", "ui")),
    CatalogEntry("/guidelines/inventory-api/", "Inventory API Guide", "guidelines", "inventory", "intermediate",
                 ("inventory", "deals", "pmp", "private marketplace", "supply", "deal management")),
    CatalogEntry("/guidelines/conversion-api/", "Conversion API Guide", "guidelines", "conversion", "intermediate",
                 ("conversion", "tracking", "pixel", "attribution", "postback", "events")),
    CatalogEntry("/guidelines/bid-model-api/", "Bid Model API Guide", "guidelines", "campaign", "advanced",
                 ("bid", "model", "optimization", "strategy", "pacing", "budget allocation")),
    CatalogEntry("/guidelines/insights-api/", "Insights API Guide", "guidelines", "reports", "advanced",
                 ("insights", "analytics", "breakdown", "dimensions", "metrics", "advanced reporting")),
    CatalogEntry("/guidelines/asset-api/", "Asset API Guide", "guidelines", "creative", "intermediate",
                 ("asset", "upload", "media", "file", "image", "storage")),
    CatalogEntry("/guidelines/master-api/", "Master Data API", "guidelines", "user", "advanced",
                 ("master", "data", "lookup", "reference", "constants", "enums")),
    CatalogEntry("/guidelines/workspace-api/", "Workspace API Guide", "guidelines", "user", "intermediate",
                 ("workspace", "organization", "multi-tenant", "accounts")),
    CatalogEntry("/guidelines/planner-api/", "Planner API Guide", "guidelines", "campaign", "advanced",
                 ("planner", "forecast", "reach", "estimate", "planning")),
    CatalogEntry("/tutorials/customer-guide/", "Customer Management Tutorial", "tutorials", "user", "intermediate",
                 ("customer", "advertiser", "client", "management", "onboarding")),
    CatalogEntry("/tutorials/deal-guide/", "Deal Management Tutorial", "tutorials", "inventory", "intermediate",
                 ("deal", "pmp", "private", "marketplace", "negotiate")),
    CatalogEntry("/getting-started/before-you-begin/", "Before You Begin", "reference", "user", "beginner",
                 ("getting started", "setup", "prerequisites", "requirements", "begin")),
    CatalogEntry("/getting-started/platform-overview/", "Platform Overview", "reference", "user", "beginner",
                 ("platform", "overview", "introduction", "dsp")),
    CatalogEntry("/getting-started/rest-api-reference/", "REST API Reference", "reference", "user", "intermediate",
                 ("rest", "api", "reference", "http", "endpoints", "methods")),
    CatalogEntry("/getting-started/api-pagination-guide/", "API Pagination Guide", "reference", "user", "intermediate",
                 ("pagination", "paging", "limit", "offset", "cursor", "pages")),
    CatalogEntry("/political-vertical/", "Political Advertising", "political", "campaign", "advanced",
                 ("political", "election", "government", "disclosure", "compliance")),
    CatalogEntry("/healthcare-vertical/", "Healthcare Advertising", "healthcare", "campaign", "advanced",
                 ("healthcare", "health", "pharma", "medical", "hipaa")),
    CatalogEntry("/migration-guides/", "Migration Guides", "migration", "user", "intermediate",
                 ("migrate", "migration", "switch", "transfer", "import")),
    CatalogEntry("/migration-guides/dv360/", "DV360 Migration", "migration", "user", "intermediate",
                 ("dv360", "google", "display video", "migration")),
    CatalogEntry("/migration-guides/xandr/", "Xandr Migration", "migration", "user", "intermediate",
                 ("xandr", "appnexus", "migration")),
    CatalogEntry("/migration-guides/the-trade-desk/", "The Trade Desk Migration", "migration", "user", "intermediate",
                 ("trade desk", "ttd", "migration")),
    CatalogEntry("/migration-guides/beeswax/", "Beeswax Migration", "migration", "user", "intermediate",
                 ("beeswax", "migration")),
)


@dataclass(frozen=True)
class KnowledgeTables:
    """Read-only bundle of every static table, shared by all engine components."""

    version: str
    stop_words: frozenset
    entity_expansions: Mapping[str, str]
    special_markers: Tuple[str, ...]
    create_verbs: Tuple[str, ...]
    update_verbs: Tuple[str, ...]
    get_verbs: Tuple[str, ...]
    conceptual_markers: Tuple[str, ...]
    base_score: int
    category_priority: Mapping[Tuple[Intent, str], int]
    path_boosts: Tuple[Tuple[Intent, str, int], ...]
    advanced_markers: Tuple[str, ...]
    advanced_penalty: int
    low_priority_categories: frozenset
    low_priority_penalty: int
    anchor_boost: int
    leaf_depth: int
    guided_categories: frozenset
    reference_label: str
    reference_correspondence: Tuple[Tuple[str, RouteLink], ...]
    related_bucket_limit: int
    category_display_names: Mapping[str, str]
    valid_doc_prefixes: Tuple[str, ...]
    auth_pattern: str
    auth_route: FallbackRoute
    fallback_routes: Tuple[FallbackRoute, ...]
    foundation_markers: Tuple[str, ...]
    workflow_markers: Tuple[str, ...]
    follow_up_markers: Tuple[str, ...]
    api_detail_markers: Tuple[str, ...]
    generic_suggestions: Tuple[RouteLink, ...]
    api_highlight_terms: Tuple[str, ...]
    api_endpoints: Tuple[ApiEndpoint, ...]
    doc_catalog: Tuple[CatalogEntry, ...]


def _validate_routes(routes: Tuple[FallbackRoute, ...]) -> None:
    for route in routes:
        seen = {base_url(route.url)}
        for link in route.related:
            link_base = base_url(link.url)
            if link_base in seen:
                raise ValueError(f"Fallback route {route.title!r} repeats base url {link_base!r}")
            seen.add(link_base)
        if any(kw != kw.lower() for kw in route.keywords):
            raise ValueError(f"Fallback route {route.title!r} has non-lowercase keywords")


def _validate_endpoints(endpoints: Tuple[ApiEndpoint, ...]) -> None:
    keys = set()
    for endpoint in endpoints:
        if endpoint.key in keys:
            raise ValueError(f"Duplicate API endpoint {endpoint.key!r}")
        keys.add(endpoint.key)
        if not any(endpoint.doc_page.startswith(prefix) for prefix in VALID_DOC_PREFIXES):
            raise ValueError(f"API endpoint {endpoint.key!r} points outside the documentation: {endpoint.doc_page!r}")


@lru_cache(maxsize=1)
def load_knowledge_tables() -> KnowledgeTables:
    """Build the process-wide tables once. Subsequent calls return the same instance."""
    _validate_routes(FALLBACK_ROUTES + (AUTH_ROUTE,))
    _validate_endpoints(API_ENDPOINTS)
    return KnowledgeTables(
        version=TABLES_VERSION,
        stop_words=STOP_WORDS,
        entity_expansions=MappingProxyType(dict(ENTITY_EXPANSIONS)),
        special_markers=SPECIAL_MARKERS,
        create_verbs=CREATE_VERBS,
        update_verbs=UPDATE_VERBS,
        get_verbs=GET_VERBS,
        conceptual_markers=CONCEPTUAL_MARKERS,
        base_score=BASE_SCORE,
        category_priority=MappingProxyType(dict(CATEGORY_PRIORITY)),
        path_boosts=PATH_BOOSTS,
        advanced_markers=ADVANCED_MARKERS,
        advanced_penalty=ADVANCED_PENALTY,
        low_priority_categories=LOW_PRIORITY_CATEGORIES,
        low_priority_penalty=LOW_PRIORITY_PENALTY,
        anchor_boost=ANCHOR_BOOST,
        leaf_depth=LEAF_DEPTH,
        guided_categories=GUIDED_CATEGORIES,
        reference_label=REFERENCE_LABEL,
        reference_correspondence=REFERENCE_CORRESPONDENCE,
        related_bucket_limit=RELATED_BUCKET_LIMIT,
        category_display_names=MappingProxyType(dict(CATEGORY_DISPLAY_NAMES)),
        valid_doc_prefixes=VALID_DOC_PREFIXES,
        auth_pattern=AUTH_PATTERN,
        auth_route=AUTH_ROUTE,
        fallback_routes=FALLBACK_ROUTES,
        foundation_markers=FOUNDATION_MARKERS,
        workflow_markers=WORKFLOW_MARKERS,
        follow_up_markers=FOLLOW_UP_MARKERS,
        api_detail_markers=API_DETAIL_MARKERS,
        generic_suggestions=GENERIC_SUGGESTIONS,
        api_highlight_terms=API_HIGHLIGHT_TERMS,
        api_endpoints=API_ENDPOINTS,
        doc_catalog=DOC_CATALOG,
    )
