"""Configuration, payloads, responses, metrics, worker and handlers of the action endpoints."""