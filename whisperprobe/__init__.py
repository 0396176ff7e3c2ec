# whisperprobe/__init__.py
# =========================
# WhisperProbe — diagnostic backend for mobile audio uploads
#
# Layers:
#   - audio/     container sniffing + acceptance checks (pure, no I/O)
#   - stt/       OpenAI Whisper pass-through
#   - api/       FastAPI endpoints (/health, /debug-audio, /analyze-audio)
#   - report.py  JSON response assembly
