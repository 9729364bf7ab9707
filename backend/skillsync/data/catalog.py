from skillsync.schemas.api import CatalogPathway, Career, QuizQuestion


ASSESSMENT_CATEGORIES = (
    "technical",
    "creative",
    "analytical",
    "leadership",
    "communication",
)

LIKERT_OPTIONS = ["Strongly Disagree", "Disagree", "Neutral", "Agree", "Strongly Agree"]

# (id, name, category, level, estimated time, description)
PATHWAYS = [
    ("frontend-foundations", "Frontend Foundations", "Web Development", "beginner", "3 months",
     "HTML, CSS, JavaScript and one component framework."),
    ("backend-apis", "Backend APIs", "Web Development", "intermediate", "4 months",
     "REST design, databases, authentication and deployment."),
    ("data-analysis", "Data Analysis", "Data", "beginner", "3 months",
     "SQL, spreadsheets, pandas and dashboarding."),
    ("machine-learning", "Machine Learning", "Data", "advanced", "6 months",
     "Supervised learning, evaluation and model serving."),
    ("cloud-devops", "Cloud & DevOps", "Infrastructure", "intermediate", "4 months",
     "Containers, CI/CD pipelines and a major cloud provider."),
    ("ux-design", "UX Design", "Design", "beginner", "3 months",
     "User research, wireframing and prototyping."),
    ("product-management", "Product Management", "Business", "intermediate", "4 months",
     "Discovery, prioritisation and stakeholder communication."),
    ("cybersecurity", "Cybersecurity Fundamentals", "Security", "intermediate", "5 months",
     "Networking, Linux, security principles and incident response."),
]

# (id, title, required skills, salary range, growth potential, description)
CAREERS = [
    ("software-engineer", "Software Engineer", ["Python", "JavaScript", "Git", "SQL"],
     "$80k - $150k", "high", "Designs, builds and maintains software systems."),
    ("data-analyst", "Data Analyst", ["SQL", "Excel", "Python", "Data Visualization"],
     "$60k - $100k", "high", "Turns raw data into decisions through analysis and reporting."),
    ("ux-designer", "UX Designer", ["Figma", "User Research", "Prototyping"],
     "$70k - $120k", "medium", "Shapes how people experience digital products."),
    ("product-manager", "Product Manager", ["Roadmapping", "Communication", "Analytics"],
     "$90k - $160k", "high", "Owns what gets built and why."),
    ("devops-engineer", "DevOps Engineer", ["Linux", "Docker", "CI/CD", "AWS"],
     "$90k - $150k", "high", "Automates delivery and keeps production healthy."),
    ("technical-writer", "Technical Writer", ["Writing", "Documentation", "Markdown"],
     "$55k - $95k", "medium", "Explains complex products to the people who use them."),
]

# (id, statement, category)
QUIZ_QUESTIONS = [
    ("q1", "I enjoy solving complex coding problems and debugging issues.", "technical"),
    ("q2", "I like designing user interfaces and creating visual experiences.", "creative"),
    ("q3", "I enjoy analyzing data and finding patterns to solve problems.", "analytical"),
    ("q4", "I feel comfortable leading teams and managing projects.", "leadership"),
    ("q5", "I excel at explaining technical concepts to non-technical people.", "communication"),
    ("q6", "I prefer working with algorithms and system architecture.", "technical"),
    ("q7", "I enjoy brainstorming innovative solutions and thinking outside the box.", "creative"),
    ("q8", "I like working with spreadsheets, metrics, and business intelligence.", "analytical"),
    ("q9", "I am good at motivating others and resolving conflicts.", "leadership"),
    ("q10", "I enjoy writing documentation and creating presentations.", "communication"),
    ("q11", "I feel energized when working on backend systems and databases.", "technical"),
    ("q12", "I love experimenting with new design trends and tools.", "creative"),
    ("q13", "I prefer making decisions based on data rather than intuition.", "analytical"),
    ("q14", "I enjoy setting goals and creating strategies to achieve them.", "leadership"),
    ("q15", "I am comfortable speaking in public and giving demos.", "communication"),
]


def pathway_catalog() -> list[CatalogPathway]:
    return [
        CatalogPathway(
            id=pathway_id,
            name=name,
            category=category,
            level=level,
            estimated_time=estimated_time,
            description=description,
        )
        for pathway_id, name, category, level, estimated_time, description in PATHWAYS
    ]


def career_catalog() -> list[Career]:
    return [
        Career(
            id=career_id,
            title=title,
            required_skills=skills,
            salary_range=salary_range,
            growth_potential=growth,
            description=description,
        )
        for career_id, title, skills, salary_range, growth, description in CAREERS
    ]


def quiz_questions() -> list[QuizQuestion]:
    return [
        QuizQuestion(id=question_id, question=statement, options=LIKERT_OPTIONS, category=category)
        for question_id, statement, category in QUIZ_QUESTIONS
    ]
