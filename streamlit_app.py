"""
LowResLove — Retro Image Converter

Run with:
    streamlit run streamlit_app.py
"""

from __future__ import annotations

import io

import numpy as np
import streamlit as st
from PIL import Image, ImageDraw

from lowreslove.adjustments import ADJUSTMENT_MAX, ADJUSTMENT_MIN, Adjustments
from lowreslove.config import ConverterConfig
from lowreslove.errors import LowResError
from lowreslove.image_io import DEFAULT_EXPORT_NAME, load_image, to_image
from lowreslove.palette import AUTO_PALETTE_NAME, PALETTES, Palette
from lowreslove.pipeline import process_image
from lowreslove.quantizer import extract_palette

# -- Page config -------------------------------------------------------
st.set_page_config(
    page_title="LowResLove",
    page_icon=None,
    layout="wide",
    initial_sidebar_state="expanded",
)

_DEFAULTS = ConverterConfig()
_CONTROLS = ["exposure", "contrast", "chrominance", "dithering"]

# -- CSS ---------------------------------------------------------------
st.markdown("""
<style>
    @import url('https://fonts.googleapis.com/css2?family=Press+Start+2P&display=swap');

    .stApp {
        background-color: #111;
        color: #eee;
    }
    .block-container {
        max-width: 1100px;
        padding-top: 2.5rem;
    }
    .app-title {
        font-family: 'Press Start 2P', monospace;
        font-size: 2.2rem;
        text-align: center;
        letter-spacing: 0.1em;
    }
    .app-subtitle, .app-footer, .palette-name {
        font-family: 'Press Start 2P', monospace;
        font-size: 0.6rem;
        text-align: center;
        color: #888;
        letter-spacing: 0.15em;
    }
    .palette-card {
        display: flex;
        height: 22px;
        border: 2px solid #333;
    }
    .palette-card-selected {
        border: 2px solid #fff;
    }
    .palette-card-color {
        flex: 1;
    }

    #MainMenu {visibility: hidden;}
    footer {visibility: hidden;}
</style>
""", unsafe_allow_html=True)


# -- Helpers -----------------------------------------------------------

def _add_frame(img: Image.Image, border: int = 12) -> Image.Image:
    w, h = img.size
    canvas = Image.new("RGB", (w + border * 2, h + border * 2), (17, 17, 17))
    canvas.paste(img.convert("RGB"), (border, border))
    draw = ImageDraw.Draw(canvas)
    draw.rectangle(
        [border - 1, border - 1, border + w, border + h],
        outline=(80, 80, 80), width=1,
    )
    return canvas


def _palette_card(palette: Palette, selected: bool) -> str:
    sel_class = " palette-card-selected" if selected else ""
    return (
        f'<div class="palette-card{sel_class}">'
        + "".join(
            f'<div class="palette-card-color" style="background:{c};"></div>'
            for c in palette.to_hex()
        )
        + "</div>"
    )


# -- Title -------------------------------------------------------------
st.markdown('<div class="app-title">LOWRESLOVE</div>', unsafe_allow_html=True)
st.markdown('<div class="app-subtitle">RETRO IMAGE CONVERTER</div>', unsafe_allow_html=True)

# -- Adjustments (sidebar) ---------------------------------------------
st.sidebar.markdown("### ADJUSTMENTS")
for name in _CONTROLS:
    st.session_state.setdefault(name, 0)
if st.sidebar.button("RESET ALL", use_container_width=True):
    for name in _CONTROLS:
        st.session_state[name] = 0
for name in _CONTROLS:
    st.sidebar.slider(name.upper(), ADJUSTMENT_MIN, ADJUSTMENT_MAX, key=name)
adjustments = Adjustments(**{name: st.session_state[name] for name in _CONTROLS})

# -- Upload ------------------------------------------------------------
uploaded = st.file_uploader(
    "SELECT PHOTO", type=["jpg", "jpeg", "png", "webp", "bmp", "gif", "jfif"],
)

# Re-cluster only when a different photo arrives
if uploaded is not None:
    data = uploaded.getvalue()
    if st.session_state.get("uploaded_data") != data:
        try:
            source = load_image(io.BytesIO(data))
        except OSError as err:
            st.error(f"Could not read this file as an image: {err}")
        else:
            st.session_state.uploaded_data = data
            try:
                st.session_state.auto_palette = extract_palette(
                    source,
                    k=_DEFAULTS.num_colors,
                    max_iterations=_DEFAULTS.max_iterations,
                )
                st.session_state.selected_palette = AUTO_PALETTE_NAME
            except LowResError as err:
                st.session_state.auto_palette = None
                st.warning(f"Could not derive a palette from this image: {err}")

palettes: dict[str, Palette] = {}
if st.session_state.get("auto_palette") is not None:
    palettes[AUTO_PALETTE_NAME] = st.session_state.auto_palette
palettes.update(PALETTES)

st.session_state.setdefault("selected_palette", _DEFAULTS.palette)
if st.session_state.selected_palette not in palettes:
    st.session_state.selected_palette = _DEFAULTS.palette

# -- Preview -----------------------------------------------------------
if st.session_state.get("uploaded_data") is not None:
    palette = palettes[st.session_state.selected_palette]

    try:
        source = load_image(io.BytesIO(st.session_state.uploaded_data))
        with st.spinner("PROCESSING..."):
            result = process_image(source, palette, adjustments, _DEFAULTS)
    except (LowResError, OSError) as err:
        # keep whatever was shown last
        st.error(f"{type(err).__name__}: {err}")
    else:
        st.session_state.last_result = result

    result = st.session_state.get("last_result")
    if result is not None:
        display = to_image(result.high_res)
        st.image(_add_frame(display), use_container_width=True)

        buf = io.BytesIO()
        display.save(buf, format="PNG")
        _, dl_col, _ = st.columns([1, 2, 1])
        with dl_col:
            st.download_button(
                "EXPORT PNG",
                data=buf.getvalue(),
                file_name=DEFAULT_EXPORT_NAME,
                mime="image/png",
                use_container_width=True,
            )

        w, h = result.size
        m1, m2, m3 = st.columns(3)
        m1.metric("Resolution", f"{w} × {h}")
        m2.metric("Colours in use", f"{len(np.unique(result.low_res[..., :3].reshape(-1, 3), axis=0))}")
        m3.metric("Mode", result.mode.value)
else:
    st.markdown(
        '<p class="app-subtitle" style="margin-top:3rem;">+ SELECT PHOTO TO BEGIN</p>',
        unsafe_allow_html=True,
    )

# -- Palette selection via clickable cards -----------------------------
st.markdown("---")
st.markdown('<div class="app-subtitle">SELECT PALETTE</div>', unsafe_allow_html=True)

names = list(palettes.keys())
cols_per_row = 4
for row_start in range(0, len(names), cols_per_row):
    cols = st.columns(cols_per_row)
    for i, pname in enumerate(names[row_start : row_start + cols_per_row]):
        with cols[i]:
            st.markdown(f'<div class="palette-name">{pname}</div>', unsafe_allow_html=True)
            st.markdown(
                _palette_card(palettes[pname], st.session_state.selected_palette == pname),
                unsafe_allow_html=True,
            )
            if st.button("USE", key=f"pal_{pname}", use_container_width=True):
                st.session_state.selected_palette = pname
                st.rerun()

st.markdown('<div class="app-footer">8-COLOR PIXEL ART CONVERTER</div>', unsafe_allow_html=True)
