"""Runtime orchestration (jobs, batch limiter, runner).

This layer is responsible for:
- running individual jobs and capturing their outcome
- splitting a job queue into batches and capping batches in flight
- tracking runner status and per-job results

It has no I/O of its own; jobs bring their own async work.
"""
