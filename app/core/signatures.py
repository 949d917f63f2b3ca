"""
Signature tables — plain ordered data, no logic.

Every table is evaluated top to bottom and the first match wins, so the
order of entries is part of the contract. Patterns are case-insensitive.
"""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class Signature:
    pattern: re.Pattern
    label: str


def _table(entries: list[tuple[str, str]]) -> list[Signature]:
    return [Signature(re.compile(p, re.IGNORECASE), label) for p, label in entries]


def _patterns(entries: list[str]) -> list[re.Pattern]:
    return [re.compile(p, re.IGNORECASE) for p in entries]


# ---------------------------------------------------------------------------
# Automation (Layer 1)
# ---------------------------------------------------------------------------

BOT_SIGNATURES: list[Signature] = _table([
    # Headless browsers / automation frameworks
    (r"headless", "Headless Browser"),
    (r"puppeteer", "Puppeteer"),
    (r"playwright", "Playwright"),
    (r"selenium", "Selenium"),
    (r"webdriver", "WebDriver"),
    (r"phantomjs", "PhantomJS"),
    (r"nightmare", "Nightmare.js"),

    # Scripting-language HTTP clients
    (r"python-requests", "Python Requests"),
    (r"python-urllib", "Python urllib"),
    (r"python", "Python Script"),
    (r"java/", "Java HTTP Client"),
    (r"node-fetch", "Node Fetch"),
    (r"axios", "Axios"),
    (r"got/", "Got HTTP Client"),
    (r"node\.js", "Node.js"),
    (r"go-http-client", "Go HTTP Client"),
    (r"ruby", "Ruby Script"),
    (r"perl", "Perl Script"),
    (r"php/", "PHP Script"),

    # CLI fetchers
    (r"curl", "cURL"),
    (r"wget", "wget"),
    (r"httpie", "HTTPie"),
    (r"lynx", "Lynx"),
    (r"libwww", "libwww"),

    # SEO tools
    (r"ahrefs", "Ahrefs Bot"),
    (r"semrush", "Semrush Bot"),
    (r"moz\s*bot", "Moz Bot"),
    (r"majestic", "Majestic Bot"),
    (r"screaming\s*frog", "Screaming Frog"),
    (r"sistrix", "Sistrix Bot"),
    (r"dotbot", "DotBot"),
    (r"rogerbot", "RogerBot"),

    # Generic crawler tokens
    (r"bot(?!\s*\d)", "Generic Bot"),
    (r"crawler", "Crawler"),
    (r"spider", "Spider"),
    (r"scraper", "Scraper"),
    (r"slurp", "Yahoo Slurp"),
    (r"archive\.org", "Archive.org Bot"),
    (r"ia_archiver", "Alexa Crawler"),

    # Ad-intelligence / spy tools
    (r"adplexity", "AdPlexity"),
    (r"bigspy", "BigSpy"),
    (r"poweradspy", "PowerAdSpy"),
    (r"dropispy", "Dropispy"),
    (r"anstrex", "Anstrex"),
    (r"adspy", "AdSpy Tool"),
    (r"spyfu", "SpyFu"),

    # Ad library / compliance crawlers
    (r"facebookexternalhit", "Facebook External Hit"),
    (r"facebot", "Facebook Bot"),

    # Other automation
    (r"httrack", "HTTrack"),
    (r"nutch", "Apache Nutch"),
    (r"scrapy", "Scrapy"),
    (r"mechanize", "Mechanize"),
    (r"cfnetwork", "CFNetwork Bot"),
    (r"apache-httpclient", "Apache HTTP Client"),
    (r"okhttp", "OkHttp"),
    (r"restsharp", "RestSharp"),
])

# Suspicious but not definitively automated (medium confidence)
SUSPICIOUS_SIGNATURES: list[Signature] = _table([
    (r"^$", "Empty User-Agent"),
    (r"^mozilla/5\.0$", "Minimal Mozilla UA"),
    (r"^mozilla/4\.0$", "Outdated Mozilla UA"),
])

BROWSER_ENGINE_TOKENS = re.compile(r"chrome|firefox|safari|edge|opera|msie|trident", re.IGNORECASE)
MOBILE_OS_TOKENS = re.compile(r"mobile|android|iphone|ipad|ipod", re.IGNORECASE)

MIN_USER_AGENT_LENGTH = 20


# ---------------------------------------------------------------------------
# Device classes (Layer 2)
# ---------------------------------------------------------------------------

# Social apps embed desktop tokens in their UA; always mobile.
DEVICE_IN_APP_PATTERNS: list[re.Pattern] = _patterns([
    r"FBAN",
    r"FBAV",
    r"Instagram",
    r"FB_IAB",
    r"Messenger",
    r"FBIOS",
    r"Line/",
    r"Twitter",
    r"LinkedInApp",
    r"Snapchat",
    r"Pinterest",
    r"TikTok",
    r"WhatsApp",
])

TABLET_PATTERNS: list[re.Pattern] = _patterns([
    r"ipad",
    r"android(?!.*mobile)",
    r"tablet",
    r"kindle",
    r"silk",
    r"playbook",
    r"nexus 7",
    r"nexus 9",
    r"nexus 10",
    r"galaxy tab",
    r"sm-t\d+",   # Samsung tablets
    r"gt-p\d+",   # older Samsung tablets
])

MOBILE_PATTERNS: list[re.Pattern] = _patterns([
    r"android.*mobile",
    r"iphone",
    r"ipod",
    r"blackberry",
    r"windows phone",
    r"opera mini",
    r"opera mobi",
    r"iemobile",
    r"mobile safari",
    r"webos",
    r"fennec",
    r"netfront",
    r"symbian",
    r"samsung.*mobile",
    r"lg.*mobile",
    r"htc.*mobile",
    r"mot.*mobile",
    r"nokia",
    r"palm",
    r"kindle",
    r"silk.*mobile",
    r"blazer",
    r"bolt",
    r"doris",
    r"gobrowser",
    r"iris",
    r"maemo",
    r"minimo",
    r"mmp",
    r"obigo",
    r"pocket",
    r"polaris",
    r"psp",
    r"semc-browser",
    r"skyfire",
    r"teashark",
    r"teleca",
    r"ucweb",
    r"up\.browser",
    r"up\.link",
    r"vodafone",
    r"wap1\.",
    r"wap2\.",
])

GENERIC_MOBILE_TOKEN = re.compile(r"mobile", re.IGNORECASE)

DESKTOP_PATTERNS: list[re.Pattern] = _patterns([
    r"windows nt",
    r"macintosh",
    r"mac os x",
    r"linux(?!.*android)",
    r"cros",      # Chrome OS
    r"x11",
])


# ---------------------------------------------------------------------------
# Origin lock (Layer 4)
# ---------------------------------------------------------------------------

AD_CLICK_ID_PARAM = "fbclid"

# Meta-family in-app browsers: label is the display name reported upstream
ORIGIN_IN_APP_SIGNATURES: list[Signature] = _table([
    (r"FBAN", "Facebook App (Android)"),
    (r"FBAV", "Facebook App Version"),
    (r"FB_IAB", "Facebook In-App Browser"),
    (r"FBIOS", "Facebook iOS"),
    (r"FBSN", "Facebook Browser"),
    (r"FBBV", "Facebook Build Version"),
    (r"FBSS", "Facebook Browser SS"),
    (r"Instagram", "Instagram App"),
    (r"Messenger", "Messenger App"),
    (r"FBMD", "Messenger Device"),
    (r"WhatsApp", "WhatsApp"),
])


def first_match(table: list[Signature], value: str) -> Signature | None:
    for signature in table:
        if signature.pattern.search(value):
            return signature
    return None


def any_match(patterns: list[re.Pattern], value: str) -> bool:
    return any(p.search(value) for p in patterns)
