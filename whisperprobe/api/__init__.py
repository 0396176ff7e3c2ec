# whisperprobe/api/__init__.py
# =============================
# API Layer — WhisperProbe
#
#   - GET  /health         service status
#   - POST /debug-audio    screen an upload, return the analysis
#   - POST /analyze-audio  screen an upload, then transcribe it with Whisper
