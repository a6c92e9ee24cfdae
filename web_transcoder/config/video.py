"""
Configuration settings for the web-playable MP4 encoding profile.

Every job uses the same profile: H.264 video and AAC audio in an MP4 container,
tuned for the fastest possible start of playback in a browser.
"""

# --- Encoder Settings ---
VIDEO_CODEC = "libx264"
AUDIO_CODEC = "aac"
OUTPUT_FORMAT = "mp4"

# https://trac.ffmpeg.org/wiki/Encode/H.264#a1.ChooseaCRFvalue
CRF = 22
PRESET = "ultrafast"
TUNE = "zerolatency"
THREADS = 1

# Fast start for progressive playback, fragmented at keyframes for low latency streaming.
MOVFLAGS = "+faststart+frag_keyframe+isml"

# --- Progress Reporting ---
# FFmpeg writes key=value progress blocks to this target, one block per update.
PROGRESS_TARGET = "pipe:1"

# The mime type suffix of files that can be played without transcoding.
PLAYABLE_MIME_SUFFIX = "mp4"
