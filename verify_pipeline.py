# verify_pipeline.py
import sys

from ndvi_watch.config import Settings
from ndvi_watch.regression import describe
from ndvi_watch.session import NdviSession

settings = Settings.from_env()
with NdviSession(settings) as session:
    session.refresh().result()
    index = session.index
    print("Loaded index:", index)
    for warning in index.warnings:
        print("Warning:", warning)
    for month in index.months():
        print(f"  {month}: {len(index.get(month))} points")

    lat = float(sys.argv[1]) if len(sys.argv) > 1 else 50.02
    lng = float(sys.argv[2]) if len(sys.argv) > 2 else 20.98
    result = session.predict(lat, lng).result()
    print("Samples:", [tuple(s) for s in result.samples])
    print(describe(result))
