"""Shared CSS and header bar for the tenant forms dashboards.

Import `render_theme_css` and `render_nav_bar` instead of inlining styles
in each page.
"""

from __future__ import annotations

import html as html_mod

import streamlit as st

# ---------------------------------------------------------------------------
# Shared CSS
# ---------------------------------------------------------------------------

_BASE_CSS = """\
@import url('https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600;700;800&display=swap');

/* Hide Streamlit chrome */
#MainMenu, footer,
div[data-testid="stToolbar"] { display: none !important; }

.stApp {
    font-family: 'Inter', -apple-system, BlinkMacSystemFont, sans-serif;
    background: #f7f9fc;
}

/* Header bar */
.nav-bar {
    display: flex;
    align-items: center;
    padding: 10px 4px;
    margin: -1rem 0 1.2rem 0;
    border-bottom: 1px solid rgba(0,0,0,0.07);
}
.nav-title {
    flex: 1;
    font-size: 1.3rem;
    font-weight: 700;
    color: #0e1726;
    letter-spacing: -0.02em;
}
.nav-subtitle {
    font-weight: 400;
    color: #5b6473;
    font-size: 0.9rem;
    margin-left: 8px;
}

/* Catalog cards */
.form-card {
    background: #fff;
    border-left: 4px solid #0e6efb;
    border-radius: 8px;
    padding: 14px 18px;
    margin-bottom: 6px;
    box-shadow: 0 1px 4px rgba(0,0,0,0.04);
}
.form-card-title { font-size: 1.05rem; font-weight: 600; color: #0e1726; }
.form-card-desc { font-size: 0.85rem; color: #5b6473; margin-top: 4px; }

/* Section labels */
.section-label {
    font-size: 0.78rem;
    font-weight: 600;
    color: #5a6a85;
    text-transform: uppercase;
    letter-spacing: 0.04em;
    margin-bottom: 4px;
    margin-top: 12px;
}

/* Field error */
.field-error {
    font-size: 0.82rem;
    color: #c62828;
    margin-top: -8px;
    margin-bottom: 8px;
}

/* Progress bar */
.progress-bar {
    background: #e8ecf0;
    border-radius: 6px;
    height: 10px;
    overflow: hidden;
    margin-bottom: 4px;
}
.progress-fill {
    height: 100%;
    background: #0e6efb;
    border-radius: 6px;
}

/* Affordability card */
.afford-card {
    background: #eef4ff;
    border-radius: 12px;
    padding: 14px 18px;
    color: #1945a5;
    margin: 8px 0 12px 0;
}
.afford-amount { font-size: 1.6rem; font-weight: 700; }

/* How it works */
.info-box {
    background: #eef4ff;
    border-radius: 12px;
    padding: 16px 20px;
    color: #1945a5;
    font-size: 0.88rem;
    line-height: 1.6;
}
"""


def render_theme_css() -> None:
    """Inject the shared stylesheet."""
    st.markdown(f"<style>\n{_BASE_CSS}\n</style>", unsafe_allow_html=True)


# ---------------------------------------------------------------------------
# Header bar
# ---------------------------------------------------------------------------

def render_nav_bar(title: str, subtitle: str = "") -> None:
    """Render the header bar with a title and optional subtitle."""
    sub = f'<span class="nav-subtitle">{html_mod.escape(subtitle)}</span>' if subtitle else ""
    st.markdown(
        f'<div class="nav-bar"><div class="nav-title">{html_mod.escape(title)}{sub}</div></div>',
        unsafe_allow_html=True,
    )


def render_progress(pct: int, caption: str = "") -> None:
    """Render a horizontal completion bar."""
    pct = max(0, min(100, int(pct)))
    st.markdown(
        f'<div class="progress-bar"><div class="progress-fill" style="width:{pct}%"></div></div>',
        unsafe_allow_html=True,
    )
    if caption:
        st.caption(caption)
