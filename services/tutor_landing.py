from pydantic import BaseModel


class TutorDTO(BaseModel):
    id: int
    name: str
    subject: str


class TutorArticleDTO(BaseModel):
    id: int
    title: str
    excerpt: str
    content: str


TUTORS = [
    TutorDTO(id=1, name="Maria Garcia", subject="Spanish"),
    TutorDTO(id=2, name="Pierre Dubois", subject="French"),
    TutorDTO(id=3, name="Yuki Tanaka", subject="Japanese"),
    TutorDTO(id=4, name="Lukas Weber", subject="German"),
]

TUTOR_ARTICLES = [
    TutorArticleDTO(
        id=1,
        title="5 Habits of Fast Language Learners",
        excerpt="Small daily routines beat weekend cram sessions.",
        content="Small daily routines beat weekend cram sessions. Review vocabulary with spaced repetition, "
                "speak out loud from day one, shadow native audio, keep a short journal in the target "
                "language and schedule a weekly conversation with a tutor.",
    ),
    TutorArticleDTO(
        id=2,
        title="How to Prepare for Your First Lesson",
        excerpt="A few minutes of preparation make the first hour count.",
        content="A few minutes of preparation make the first hour count. Write down why you are learning, "
                "list situations you want to handle, note words you already know and bring questions "
                "about grammar that confused you before.",
    ),
    TutorArticleDTO(
        id=3,
        title="Grammar or Conversation First?",
        excerpt="Why the answer depends on your goal.",
        content="Why the answer depends on your goal. Travellers profit from conversation drills early, "
                "exam candidates need structured grammar, most learners do best alternating both "
                "within the same week.",
    ),
]


class TutorLanding:
    """Language tutor landing page. At most one article is expanded at a time."""

    def __init__(self):
        self.expanded_article_id: int | None = None

    def toggle_article(self, article_id: int) -> None:
        if all(article.id != article_id for article in TUTOR_ARTICLES):
            raise KeyError(article_id)
        self.expanded_article_id = None if self.expanded_article_id == article_id else article_id

    def snapshot(self) -> dict:
        articles = []
        for article in TUTOR_ARTICLES:
            expanded = article.id == self.expanded_article_id
            articles.append({
                "id": article.id,
                "title": article.title,
                "body": article.content if expanded else article.excerpt,
                "expanded": expanded,
                "action": "Show Less" if expanded else "Read More",
            })
        return {
            "tutors": [tutor.model_dump() for tutor in TUTORS],
            "articles": articles,
        }
