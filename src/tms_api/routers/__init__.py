"""HTTP routers for tasks and task comments."""
