SYSTEM_PROMPT = (
    "You are a resume parser that returns ONLY valid JSON matching the requested schema. "
    "Do not include markdown code fences, explanations, or any text outside the JSON object."
)


EXTRACTION_PROMPT = """
You are an expert at extracting portfolio-relevant information from resumes.
The attached images are the pages of one resume, in order. Extract ONLY what a
personal portfolio website needs:

1. name: full name from the header.
2. email: email address from the header.
3. location: city and state/country, if present.
4. summary: professional summary or objective, at most {summary_sentences} sentences.
5. experience: only the top {max_experience} most recent or relevant positions, each with
   title, company, duration ("Start - End") and a brief description of 2-3 key achievements.
6. education: only the highest or most relevant degree, with degree, institution and year.
7. skills: only the {min_skills}-{max_skills} most relevant skills, technical skills first.
8. projects: only the top {min_projects}-{max_projects} projects, each with title, a 1-3 sentence
   description, and the key technologies as ONE comma-separated string.

Exclude phone numbers, certifications and less relevant history.

Schema:
{{
  "name": string|null,
  "email": string|null,
  "location": string|null,
  "summary": string|null,
  "experience": [
    {{"title": string, "company": string, "duration": string, "description": string}}
  ],
  "education": [
    {{"degree": string, "institution": string, "year": string|null}}
  ],
  "skills": [string],
  "projects": [
    {{"title": string, "description": string, "technologies": string}}
  ]
}}

Rules:
- Use ONLY information visible in the resume pages; do not fabricate.
- If a field is missing, use null for strings or [] for arrays.
- Keep all text concise and portfolio-focused.
- Return ONLY the JSON object.
"""


def build_prompt(
    *,
    max_experience: int = 3,
    min_skills: int = 8,
    max_skills: int = 12,
    min_projects: int = 2,
    max_projects: int = 4,
    summary_sentences: int = 3,
) -> str:
    return EXTRACTION_PROMPT.format(
        max_experience=max_experience,
        min_skills=min_skills,
        max_skills=max_skills,
        min_projects=min_projects,
        max_projects=max_projects,
        summary_sentences=summary_sentences,
    )
