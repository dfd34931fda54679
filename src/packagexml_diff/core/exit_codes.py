from __future__ import annotations

# "different" and "failed" share a status; the log stream tells them apart.
OK = 0
DIFFERENT = 1
ERR_RUN = 1
