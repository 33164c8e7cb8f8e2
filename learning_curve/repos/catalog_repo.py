from __future__ import annotations

from typing import Protocol

from learning_curve.models.catalog import LearningPath, Module, Quiz, QuizQuestion, Resource


class CatalogRepo(Protocol):
    async def list_paths(self) -> list[LearningPath]: ...
    async def get_path(self, path_id: int) -> LearningPath | None: ...
    async def get_path_by_slug(self, slug: str) -> LearningPath | None: ...
    async def list_modules(self, path_id: int) -> list[Module]: ...
    async def get_module(self, module_id: int) -> Module | None: ...
    async def get_quiz(self, quiz_id: int) -> Quiz | None: ...
    async def get_quiz_for_module(self, module_id: int) -> Quiz | None: ...
    async def list_quiz_questions(self, quiz_id: int) -> list[QuizQuestion]: ...
    async def list_resources(self) -> list[Resource]: ...
    async def get_resource(self, resource_id: int) -> Resource | None: ...


class InMemoryCatalogRepo:
    """Read-only catalog; populated by seed_sample_catalog()."""

    def __init__(self) -> None:
        self._paths: dict[int, LearningPath] = {}
        self._modules: dict[int, Module] = {}
        self._quizzes: dict[int, Quiz] = {}
        self._questions: dict[int, QuizQuestion] = {}
        self._resources: dict[int, Resource] = {}

    def add_path(self, path: LearningPath) -> None:
        self._paths[path.id] = path

    def add_module(self, module: Module) -> None:
        self._modules[module.id] = module

    def add_quiz(self, quiz: Quiz) -> None:
        self._quizzes[quiz.id] = quiz

    def add_question(self, question: QuizQuestion) -> None:
        self._questions[question.id] = question

    def add_resource(self, resource: Resource) -> None:
        self._resources[resource.id] = resource

    async def list_paths(self) -> list[LearningPath]:
        paths = [p for p in self._paths.values() if p.is_published]
        return sorted(paths, key=lambda p: (p.position, p.id))

    async def get_path(self, path_id: int) -> LearningPath | None:
        return self._paths.get(path_id)

    async def get_path_by_slug(self, slug: str) -> LearningPath | None:
        return next((p for p in self._paths.values() if p.slug == slug), None)

    async def list_modules(self, path_id: int) -> list[Module]:
        modules = [
            m
            for m in self._modules.values()
            if m.path_id == path_id and m.is_published
        ]
        return sorted(modules, key=lambda m: (m.position, m.id))

    async def get_module(self, module_id: int) -> Module | None:
        return self._modules.get(module_id)

    async def get_quiz(self, quiz_id: int) -> Quiz | None:
        return self._quizzes.get(quiz_id)

    async def get_quiz_for_module(self, module_id: int) -> Quiz | None:
        return next((q for q in self._quizzes.values() if q.module_id == module_id), None)

    async def list_quiz_questions(self, quiz_id: int) -> list[QuizQuestion]:
        questions = [q for q in self._questions.values() if q.quiz_id == quiz_id]
        return sorted(questions, key=lambda q: (q.position, q.id))

    async def list_resources(self) -> list[Resource]:
        resources = [r for r in self._resources.values() if r.is_published]
        return sorted(resources, key=lambda r: r.id)

    async def get_resource(self, resource_id: int) -> Resource | None:
        return self._resources.get(resource_id)


# (id, slug, title, difficulty, [(module_id, module_slug, module_title), ...])
SAMPLE_PATHS: list[tuple[int, str, str, str, list[tuple[int, str, str]]]] = [
    (
        1,
        "ai-fundamentals",
        "AI Fundamentals",
        "beginner",
        [
            (101, "what-is-ai", "What is AI?"),
            (102, "history-of-ai", "A Short History of AI"),
            (103, "ai-ethics", "AI Ethics"),
        ],
    ),
    (
        2,
        "machine-learning",
        "Machine Learning",
        "intermediate",
        [
            (201, "supervised-learning", "Supervised Learning"),
            (202, "model-evaluation", "Model Evaluation"),
        ],
    ),
    (
        3,
        "deep-learning",
        "Deep Learning",
        "advanced",
        [
            (301, "neural-networks", "Neural Networks"),
            (302, "backpropagation", "Backpropagation"),
        ],
    ),
    (
        4,
        "natural-language-processing",
        "Natural Language Processing",
        "advanced",
        [
            (401, "tokenization", "Tokenization"),
            (402, "transformers", "Transformers"),
        ],
    ),
    (
        5,
        "computer-vision",
        "Computer Vision",
        "advanced",
        [
            (501, "image-basics", "Image Basics"),
            (502, "convolutions", "Convolutions"),
        ],
    ),
]


_TF = ("True", "False")

# (module_id, title, [(question_type, question, options, correct_answer, explanation), ...])
# Quiz ids follow list order, starting at 1.
SAMPLE_QUIZZES: list[tuple[int, str, list[tuple[str, str, tuple[str, ...], str, str]]]] = [
    (
        101,
        "What is AI? Check",
        [
            (
                "multiple_choice",
                "Which of these best describes narrow AI?",
                (
                    "A system that matches humans at every task",
                    "A system built for one specific task",
                    "Any program that uses a database",
                ),
                "A system built for one specific task",
                "Narrow AI solves a single, well-defined problem.",
            ),
            (
                "true_false",
                "Every AI system learns from data.",
                _TF,
                "False",
                "Rule-based expert systems are AI without learning.",
            ),
        ],
    ),
    (
        102,
        "History of AI Check",
        [
            (
                "multiple_choice",
                "Where was the term 'artificial intelligence' coined in 1956?",
                ("Dartmouth workshop", "Bell Labs", "MIT Media Lab"),
                "Dartmouth workshop",
                "The 1956 Dartmouth summer workshop named the field.",
            ),
        ],
    ),
    (
        103,
        "AI Ethics Check",
        [
            (
                "true_false",
                "A model trained on biased data can reproduce that bias.",
                _TF,
                "True",
                "Models learn the patterns present in their training data.",
            ),
        ],
    ),
    (
        201,
        "Supervised Learning Check",
        [
            (
                "multiple_choice",
                "What does a supervised learning dataset contain?",
                ("Only inputs", "Inputs paired with labels", "Only rewards"),
                "Inputs paired with labels",
                "Supervision comes from the known label of each example.",
            ),
            (
                "code",
                "In scikit-learn, which method trains an estimator?",
                (),
                "fit",
                "Estimators learn their parameters in fit(X, y).",
            ),
        ],
    ),
    (
        202,
        "Model Evaluation Check",
        [
            (
                "multiple_choice",
                "Why keep a held-out test set?",
                (
                    "To speed up training",
                    "To estimate performance on unseen data",
                    "To store extra labels",
                ),
                "To estimate performance on unseen data",
                "Scores on training data overstate real performance.",
            ),
        ],
    ),
    (
        301,
        "Neural Networks Check",
        [
            (
                "true_false",
                "A neural network without non-linear activations is a linear model.",
                _TF,
                "True",
                "Stacked linear layers compose into one linear map.",
            ),
        ],
    ),
    (
        302,
        "Backpropagation Check",
        [
            (
                "multiple_choice",
                "Backpropagation computes gradients using which rule?",
                ("Chain rule", "Product rule", "Bayes' rule"),
                "Chain rule",
                "Gradients flow backwards through each layer by the chain rule.",
            ),
        ],
    ),
    (
        401,
        "Tokenization Check",
        [
            (
                "multiple_choice",
                "Which tokenizer splits rare words into frequent pieces?",
                ("Whitespace", "Byte-pair encoding", "Character n-gram hashing"),
                "Byte-pair encoding",
                "BPE merges frequent symbol pairs into subword units.",
            ),
        ],
    ),
    (
        402,
        "Transformers Check",
        [
            (
                "true_false",
                "Self-attention lets every token attend to every other token.",
                _TF,
                "True",
                "Attention weights are computed for all token pairs.",
            ),
        ],
    ),
    (
        501,
        "Image Basics Check",
        [
            (
                "multiple_choice",
                "How many channels does an RGB image have?",
                ("1", "3", "4"),
                "3",
                "Red, green and blue each get one channel.",
            ),
        ],
    ),
    (
        502,
        "Convolutions Check",
        [
            (
                "true_false",
                "A convolution layer shares its weights across image positions.",
                _TF,
                "True",
                "The same kernel slides over every position.",
            ),
        ],
    ),
]

# (title, resource_type, difficulty, url, tags)
SAMPLE_RESOURCES: list[tuple[str, str, str, str, tuple[str, ...]]] = [
    (
        "Elements of AI",
        "course",
        "beginner",
        "https://www.elementsofai.com/",
        ("fundamentals",),
    ),
    (
        "scikit-learn User Guide",
        "documentation",
        "intermediate",
        "https://scikit-learn.org/stable/user_guide.html",
        ("machine-learning", "python"),
    ),
    (
        "Deep Learning Book",
        "book",
        "advanced",
        "https://www.deeplearningbook.org/",
        ("deep-learning",),
    ),
    (
        "The Illustrated Transformer",
        "article",
        "intermediate",
        "https://jalammar.github.io/illustrated-transformer/",
        ("nlp", "transformers"),
    ),
    (
        "TensorFlow Playground",
        "tool",
        "beginner",
        "https://playground.tensorflow.org/",
        ("neural-networks",),
    ),
]


def sample_paths() -> list[tuple[LearningPath, list[Module]]]:
    out: list[tuple[LearningPath, list[Module]]] = []
    for position, (path_id, slug, title, difficulty, modules) in enumerate(SAMPLE_PATHS):
        path = LearningPath(
            id=path_id, slug=slug, title=title, difficulty=difficulty, position=position
        )
        out.append(
            (
                path,
                [
                    Module(
                        id=module_id,
                        path_id=path_id,
                        slug=module_slug,
                        title=module_title,
                        difficulty=difficulty,
                        position=module_position,
                    )
                    for module_position, (module_id, module_slug, module_title) in enumerate(
                        modules
                    )
                ],
            )
        )
    return out


def sample_quizzes() -> list[tuple[Quiz, list[QuizQuestion]]]:
    out: list[tuple[Quiz, list[QuizQuestion]]] = []
    question_id = 0
    for quiz_id, (module_id, title, questions) in enumerate(SAMPLE_QUIZZES, start=1):
        items: list[QuizQuestion] = []
        for position, (kind, text, options, answer, explanation) in enumerate(questions):
            question_id += 1
            items.append(
                QuizQuestion(
                    id=question_id,
                    quiz_id=quiz_id,
                    question=text,
                    question_type=kind,
                    correct_answer=answer,
                    options=options,
                    explanation=explanation,
                    position=position,
                )
            )
        out.append((Quiz(id=quiz_id, module_id=module_id, title=title), items))
    return out


def sample_resources() -> list[Resource]:
    return [
        Resource(
            id=resource_id,
            title=title,
            resource_type=kind,
            difficulty=difficulty,
            url=url,
            tags=tags,
        )
        for resource_id, (title, kind, difficulty, url, tags) in enumerate(
            SAMPLE_RESOURCES, start=1
        )
    ]


def seed_sample_catalog(repo: InMemoryCatalogRepo) -> None:
    """Seed the sample paths, quizzes and resources for development/testing."""
    for path, modules in sample_paths():
        repo.add_path(path)
        for module in modules:
            repo.add_module(module)
    for quiz, questions in sample_quizzes():
        repo.add_quiz(quiz)
        for question in questions:
            repo.add_question(question)
    for resource in sample_resources():
        repo.add_resource(resource)
