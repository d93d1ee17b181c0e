"""Import pipeline services: matching, recording, orchestration, pools."""
