import pytest
from bs4 import BeautifulSoup


@pytest.fixture
def resume_payload():
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "location": "Berlin, Germany",
        "summary": "Backend engineer who likes boring, reliable systems.",
        "githubUrl": "github.com/janedoe",
        "linkedinUrl": "https://linkedin.com/in/janedoe",
        "experience": [
            {
                "title": "Senior Engineer",
                "company": "Acme",
                "duration": "2021 - Present",
                "description": "Led the billing rewrite.",
            }
        ],
        "education": [],
        "skills": ["Python", "PostgreSQL", "Kubernetes"],
        "projects": [],
    }


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


@pytest.fixture
def soup_of():
    return parse_html
