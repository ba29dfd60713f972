# dashboard.py
"""
NDVI Month Watch (Poland, MODIS MOD13Q1)

- Loads NDVI from the ORNL MODIS web service, falling back to the bundled CSV
- Shows one month of points on a lat/lng scatter, selected with a slider
- Forecasts next-month NDVI at a queried location from that location's history
"""
import logging

import matplotlib.pyplot as plt
import streamlit as st

from ndvi_watch.config import MONTH_LABELS, Settings, month_label
from ndvi_watch.regression import describe
from ndvi_watch.session import NdviSession

# Page config and logger
st.set_page_config(page_title="NDVI Month Watch", layout="wide")
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("dashboard")


@st.cache_resource(show_spinner=False)
def get_session() -> NdviSession:
    session = NdviSession(Settings.from_env())
    session.refresh().result()
    return session


# Sidebar controls
st.sidebar.title("NDVI Month Watch")
if st.sidebar.button("🔄 Refresh data"):
    try:
        st.cache_resource.clear()
    except Exception:
        logger.exception("Could not clear cached session")

with st.spinner("Loading NDVI data..."):
    try:
        session = get_session()
    except ValueError as e:
        logger.exception("Invalid settings")
        st.error(f"Invalid settings: {e}")
        st.stop()

index = session.index
for warning in index.warnings:
    st.warning(warning)

months = index.months() or sorted(MONTH_LABELS)
if len(months) > 1:
    month = st.sidebar.select_slider("Month", options=months, value=months[0], format_func=month_label)
else:
    month = months[0]

st.sidebar.markdown("### Forecast location")
region = session.settings.region
query_lat = st.sidebar.number_input("Latitude", min_value=-90.0, max_value=90.0,
                                    value=float(region.center_lat), step=0.01, format="%.4f")
query_lng = st.sidebar.number_input("Longitude", min_value=-180.0, max_value=180.0,
                                    value=float(region.center_lng), step=0.01, format="%.4f")
predict_clicked = st.sidebar.button("Predict next month")

# Header
st.header(f"NDVI — {month_label(month)}")
st.caption(f"Source: {index.source or 'none'} · {index.total_points()} points across {len(index)} month(s)")

points = index.to_frame(month)
fig, ax = plt.subplots(figsize=(9, 7))
if points.empty:
    st.info("No points for this month.")
else:
    # Marker opacity tracks NDVI
    alpha = points["ndvi"].clip(0.05, 1.0).to_numpy()
    sc = ax.scatter(points["lng"], points["lat"], c=points["ndvi"], cmap="RdYlGn",
                    vmin=0.0, vmax=1.0, s=25, alpha=alpha)
    plt.colorbar(sc, ax=ax, label="NDVI")
ax.scatter([query_lng], [query_lat], color="purple", s=120, marker="X", label="Forecast location")
ax.set_xlim(region.lng_min, region.lng_max)
ax.set_ylim(region.lat_min, region.lat_max)
ax.set_xlabel("Longitude")
ax.set_ylabel("Latitude")
ax.legend(loc="upper left")
st.pyplot(fig)

if predict_clicked:
    result = session.predict(query_lat, query_lng).result()
    if result.available:
        st.success(describe(result))
    else:
        st.warning(describe(result))
    if result.samples:
        st.write("Training samples:", [{"month": s.month, "ndvi": round(s.ndvi, 3)} for s in result.samples])

st.markdown("""
**NDVI interpretation guide**
- **0.6 – 1.0:** Healthy, dense vegetation
- **0.2 – 0.6:** Moderate vegetation, possible stress
- **0.0 – 0.2:** Bare soil or sparse vegetation

_Forecasts are a straight-line trend through at most a few months and are not a statistical guarantee._
""")
# End of dashboard
