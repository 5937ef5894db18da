RESUME_PARSE_PROMPT = """You are an expert resume analyst.
Analyze the attached resume document.
Extract the key "ingredients" for a job application profile.

Categorize each of them as one of:
- 'skill' (Technical or soft skills)
- 'experience' (Work history, job titles)
- 'education' (Degrees, universities)
- 'certification' (Certificates, courses)
- 'project' (Notable personal or professional projects)

For 'experience', 'education', 'certification' and 'project', use the 'details' field to provide dates or short context (e.g. "2020-2022", "Senior Level").
For 'skill', 'details' can be the proficiency level if available, otherwise leave it empty.

Return a JSON array of objects with the fields: name, category, details.
Do not generate identifiers.
"""

JOB_TEXT_EXTRACTION_PROMPT = """You are an OCR assistant used in a job application app.
Extract the text from this job description screenshot.

1. Maintain the logical structure (headers, bullet points) using Markdown.
2. Ignore irrelevant UI elements (like "Apply Now" buttons, navigation bars, ads) if they appear in the screenshot.
3. Return ONLY the raw extracted text in Markdown format.
"""

MATCH_ANALYSIS_PROMPT = """You are a senior recruiter reviewing a candidate for an open position.

Candidate profile:
{ingredients_list}

Job description:
---
{job_description}
---

Analyze the candidate profile against the job description.
1. Give a match score from 0 to 100 based on how well the profile fits the job.
2. List the missing requirements (skills or experiences the job asks for that the candidate lacks).
3. Provide a brief summary of the fit.
4. Give 3 tips to improve the application.
5. Extract the company name from the job description. If it is not explicitly stated, use "{unknown_company}".
"""

COMPANY_RESEARCH_PROMPT = """You are an expert career strategist and company researcher.
Research the company "{company_name}".

Candidate context (skills and experience):
{ingredients_names}

Provide a strategic company analysis tailored to this candidate.

Output format (Markdown):

### Atmosphere & Values
Analyze the company's mission and culture.
*Crucial:* Explicitly identify which of the candidate's specific skills or values (from the context provided) align best with this company.

### News & Strategy
Summarize recent headlines, financial performance, or product launches.

### Likely Interview Questions
List 3-5 specific, high-impact interview questions the candidate might be asked, based directly on the company's recent news, strategy and values.

### Key Takeaways
*   **Alignment:** The strongest selling point for this candidate.
*   **Conversation Starter:** An insightful question the candidate should ask the interviewer.
*   **Focus:** One key competency to emphasize during the interview.

Keep it professional, insightful, and actionable.
"""

COVER_LETTER_PROMPT = """You are an expert executive career coach and professional copywriter.
Write a highly professional, passionate, and persuasive cover letter for this job application.

Candidate profile:
{ingredients_list}

Job description:
---
{job_description}
---

Directives:
1. Tone: Professional, confident, enthusiastic, and passionate.
2. Content: Focus strictly on the value proposition. Connect the candidate's skills directly to the company's needs found in the job description.
3. Structure: Use standard business letter formatting (Subject line, Salutation, Opening, Body Paragraphs, Closing).
4. CRITICAL: Do NOT use cooking metaphors, puns, or any product theme in the letter text. The output must be a serious, polished document ready to send to a hiring manager.
5. Format: Markdown.
"""

REFINEMENT_PROMPT = """You are a professional resume and cover letter editor.
Rewrite the text below in exactly three alternative ways.

{context_block}Text to refine:
---
{text}
---

Rules:
1. Keep every fact from the original text. Do not invent achievements, numbers or skills.
2. Make each version clearer and more impactful than the original.
3. Make the three versions meaningfully different from one another.
4. Return exactly three variations.
"""

INTERVIEW_QUESTION_PROMPT = """You are an experienced hiring manager conducting a mock job interview.

Candidate profile:
{ingredients_list}

Job description:
---
{job_description}
---

Interview so far:
{transcript}

Ask the next interview question.
1. If the interview has not started yet, open with a short welcome and a first question about the candidate's background.
2. Otherwise, build on the candidate's previous answers and cover a topic from the job description that has not been discussed yet.
3. Ask exactly ONE question.
4. Do NOT give feedback on previous answers.
5. Return only the question text, in plain text without Markdown.
"""

TEXT_ANSWER_EVALUATION_PROMPT = """You are an experienced hiring manager evaluating a mock interview answer.

Question:
{question}

Candidate's answer:
---
{answer}
---

Evaluate the answer.
1. Give a score from 1 to 10 for content, structure, and relevance to the question.
2. Give concise, constructive feedback (2-4 sentences) the candidate can act on.
"""

AUDIO_ANSWER_EVALUATION_PROMPT = """You are an experienced hiring manager evaluating a recorded mock interview answer.

Question:
{question}

The attached audio contains the candidate's spoken answer.
1. Transcribe what the candidate said.
2. Give a score from 1 to 10 for content, structure, delivery, and relevance to the question.
3. Give concise, constructive feedback (2-4 sentences) on both the content and the delivery.
"""
