"""Streamlit playground - HTTP only, no backend imports."""

import requests
import streamlit as st

API_BASE = "http://localhost:8000"

st.set_page_config(page_title="Captioner Playground", layout="centered")
st.title("Captioner Playground")
st.caption("Upload an image and caption it. Communicates with backend via HTTP only.")

api_base = st.text_input("API Base URL", value=API_BASE, key="api_base")

with st.expander("API"):
    st.markdown("""
| Method | Path | Purpose |
|--------|------|---------|
| POST | `/v1/captions` | Caption an image (multipart field `image`) |
| GET | `/healthz` | Active provider and model |
""")
    st.code("""
{
  "caption": "a dog running on grass",
  "model": "Salesforce/blip-image-captioning-large",
  "processing_time_ms": 812,
  "filename": "dog.jpg",
  "trace_id": "uuid"
}
""", language="json")

if st.button("Check backend"):
    try:
        r = requests.get(f"{api_base.rstrip('/')}/healthz", timeout=5)
        r.raise_for_status()
        st.json(r.json())
    except requests.RequestException as e:
        st.error(f"Health check failed: {e}")

uploaded_file = st.file_uploader(
    "Choose image (JPG, PNG, WebP, GIF)",
    type=["jpg", "jpeg", "png", "webp", "gif"],
)

if uploaded_file:
    st.image(uploaded_file.getvalue(), width="stretch")

if uploaded_file and st.button("Caption"):
    with st.spinner("Generating caption..."):
        try:
            r = requests.post(
                f"{api_base.rstrip('/')}/v1/captions",
                files={
                    "image": (
                        uploaded_file.name,
                        uploaded_file.getvalue(),
                        uploaded_file.type or "application/octet-stream",
                    )
                },
                timeout=90,
            )
        except requests.RequestException as e:
            st.error(f"Request failed: {e}")
            st.stop()

    try:
        data = r.json()
    except ValueError:
        data = {"detail": r.text}

    if r.ok:
        st.success(data["caption"])
        col1, col2 = st.columns(2)
        col1.metric("Model", data["model"])
        col2.metric("Processing", f"{data['processing_time_ms']} ms")
        st.caption(f"trace_id: {data['trace_id']}")
    else:
        st.error(f"Caption failed ({r.status_code}): {data.get('detail', 'Unknown error')}")
        if data.get("trace_id"):
            st.caption(f"trace_id: {data['trace_id']}")
