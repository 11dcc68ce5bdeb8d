DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_VIEWPORT = {"width": 1920, "height": 1080}

BROWSER_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-web-security",
    "--disable-features=VizDisplayCompositor",
    "--disable-blink-features=AutomationControlled",
    "--autoplay-policy=no-user-gesture-required",
    "--disable-dev-shm-usage",
    "--no-first-run",
    "--no-default-browser-check",
    "--disable-extensions",
]

# Runs before any page script: hide the automation flag and keep a copy of console output.
PAGE_INIT_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', {get: () => undefined});
window.chrome = window.chrome || { runtime: {} };
window.capturedLogs = [];
(() => {
    const originalLog = console.log;
    console.log = (...args) => {
        window.capturedLogs.push(args.join(" "));
        originalLog.apply(console, args);
    };
})();
"""

MEDIA_URL_PATTERNS = [
    r"\.m3u8(\?.*)?$",
    r"\.mp4(\?.*)?$",
    r"\.webm(\?.*)?$",
    r"\.mkv(\?.*)?$",
    r"\.ts(\?.*)?$",
    r"/stream/",
    r"/hls/",
    r"/dash/",
    r"/video/",
    r"/media/",
    r"playlist\.m3u8",
    r"manifest\.mpd",
]

# Resource types that count as media when the URL also mentions "video"
MEDIA_RESOURCE_TYPES = {"media", "fetch", "xhr"}

PLAY_BUTTON_SELECTORS = [
    'button[aria-label*="play" i]',
    'button[title*="play" i]',
    ".play-button",
    ".vjs-play-control",
    '[data-testid*="play"]',
    'button:has(svg[data-icon="play"])',
]
