"""JobCook service package.

Helps a job applicant turn career data ("ingredients") into application
material by orchestrating calls to a generative-language-model backend.

Notes:
    1. `app.core` holds configuration, the error taxonomy and the session registry.
    2. `app.models` holds the domain types shared by every layer.
    3. `app.llm` holds the AI orchestration core: retry envelope, prompt
       builders, response decoders, workflows and the interview state machine.
    4. `app.api` exposes the workflows over HTTP.
    5. No disk, network, or database access occurs in this module directly.

"""
