# File: app/services/prompts.py

"""
Prompt templates sent to the model.

Reports and suggestions are produced in French for the dashboard's users;
the bracketed placeholders of the reputation template are replaced
literally, every occurrence.
"""

from typing import Iterable

from app.models.project import Project

COMPANY_PLACEHOLDER = "[Nom de l'entreprise]"
WEBSITE_PLACEHOLDER = "[https://www.du.edu/](https://www.du.edu/)"
COMPETITOR1_PLACEHOLDER = "[Nom du concurrent 1]"
COMPETITOR2_PLACEHOLDER = "[Nom du concurrent 2]"
CITY_PLACEHOLDER = "[Ville de l'entreprise]"

REPUTATION_PROMPT_TEMPLATE = """Règle Fondamentale : Instruction impérative : Si tu ne disposes pas d'une information vérifiable pour répondre à une question, admets-le clairement. Tu ne dois jamais inventer de faits, de statistiques ou d'avis. La fiabilité est la priorité absolue.

Rôle et Objectif : Tu agis en tant que 'Reputation Analyst AI', un expert en analyse de réputation numérique. Ta mission est de fournir un rapport complet, neutre et exploitable sur une entreprise, en te basant sur toutes les informations publiques disponibles en ligne.

Informations en Entrée :

Nom de l'entreprise : [Nom de l'entreprise]

URL du site web : [https://www.du.edu/](https://www.du.edu/)

Concurrent 1 (optionnel) : [Nom du concurrent 1]

Concurrent 2 (optionnel) : [Nom du concurrent 2]

Ville de l'entreprise : [Ville de l'entreprise]

Partie 1 : Bilan de Réputation de [Nom de l'entreprise]

1.1. Synthèse de l'Identité : Décris en 5 phrases la mission, l'historique et les offres clés de l'entreprise.

1.2. Données pour Graphe Visuel (Nuage de Mots Pondéré) : Génère les données pour un nuage de mots pondéré au format JSON. Tu dois fournir un tableau de 20 à 30 objets, où chaque objet contient une clé "mot" et une clé "poids" (un score de 10 à 100). Le poids doit refléter la fréquence et l'impact sémantique du terme.

1.3. Analyse de Sentiment Global : Évalue la perception publique (Positive, Neutre, Négative, Mixte) et justifie avec des exemples de thèmes récurrents.

1.4. Forces et Faiblesses Perçues : Liste 3 points forts et 3 points faibles mentionnés publiquement.

1.5. Principaux Sujets de Discussion : Identifie les 3 sujets les plus fréquemment associés à l'entreprise.

1.6. Pistes d'Amélioration Recommandées : Pour chaque faiblesse identifiée, propose une action marketing ou de communication corrective.

Partie 2 : Positionnement Concurrentiel (Cette partie ne sera générée que si des concurrents sont fournis)

Compare la réputation de [Nom de l'entreprise] à celle de [Nom du concurrent 1] et [Nom du concurrent 2] en te basant sur le sentiment en ligne, les spécialités perçues et les points forts mis en avant.

Partie 3 : Analyse de Visibilité dans les Réponses IA

En te basant sur toute ton analyse précédente (secteur d'activité, services clés, concurrents), ta mission pour cette partie se déroule en deux temps :

3.1. Génération de Questions : D'abord, formule une liste de 15 à 20 questions pertinentes et variées qu'un prospect ou un internaute pourrait poser à une IA grand public pour se renseigner sur les services de [Nom de l'entreprise] ou sur des sujets connexes où elle pourrait être mentionnée (ex: questions comparatives, questions sur le meilleur prestataire local, questions sur les tarifs, questions sur des services spécifiques, etc.).

3.2. Analyse de Visibilité : Ensuite, pour chacune des questions que tu viens de générer, fournis l'analyse concise en 3 points que nous avons définie :

Mention probable : Réponds par Oui, Non, ou Probable.

Justification : Explique en une courte phrase pourquoi (ex: "forte notoriété locale", "spécialiste reconnu du sujet", "la concurrence est plus visible sur ce créneau").

Concurrents cités : Liste les concurrents ou autres acteurs qui seraient probablement mentionnés.

---

Pied de Page du Rapport Termine ton rapport avec la notice méthodologique suivante : "Ce rapport est une synthèse générée par une IA en se basant sur les données publiques accessibles. Il constitue une analyse de réputation et non une vérité absolue.

---"""

FREEFORM_MISSING = "N/A"

STRICT_JSON_SYSTEM_MESSAGE = "Réponds en JSON strict."


def build_reputation_prompt(
    company_name: str,
    website: str,
    competitor1: str,
    competitor2: str,
    city: str,
) -> str:
    return (
        REPUTATION_PROMPT_TEMPLATE
        .replace(COMPANY_PLACEHOLDER, company_name)
        .replace(COMPETITOR1_PLACEHOLDER, competitor1)
        .replace(COMPETITOR2_PLACEHOLDER, competitor2)
        .replace(CITY_PLACEHOLDER, city)
        .replace(WEBSITE_PLACEHOLDER, website)
    )


def build_freeform_prompt(
    project_name: str,
    website_url: str,
    competitor1: str | None = None,
    competitor2: str | None = None,
    city: str | None = None,
) -> str:
    """Same report, requested as free text for the standalone endpoint."""
    return build_reputation_prompt(
        company_name=project_name,
        website=website_url,
        competitor1=competitor1 or FREEFORM_MISSING,
        competitor2=competitor2 or FREEFORM_MISSING,
        city=city or FREEFORM_MISSING,
    )


def _or_dash(value: str | None) -> str:
    return value if value else "—"


def _aliases_text(aliases: Iterable[str]) -> str:
    joined = ", ".join(aliases)
    return joined or "—"


def build_domains_prompt(project: Project) -> str:
    return f"""Tu es un consultant marketing. À partir des informations ci-dessous, propose **5 à 8** domaines d'activité pertinents pour la marque.
Réponds **uniquement** avec un **objet JSON** de la forme {{"domains": ["Conseil", "Technologie"]}}.

Contexte:
- Marque: {project.name}
- Description: {_or_dash(project.description)}
- Pays: {_or_dash(project.country_code)}
- Ville: {_or_dash(project.city)}
- Alias/produits: {_aliases_text(project.aliases)}
- Site: {_or_dash(project.website_url)}"""


def build_competitors_prompt(brand: str, city: str, domain_name: str) -> str:
    return f"""Peux-tu me donner des concurrents directs de "{brand}" localisé à {city}, dans le domaine "{domain_name}".

Contraintes OBLIGATOIRES :
Même ville : {city}
Même domaine : {domain_name}
Ne pas inventer.
Réponds strictement au format JSON suivant (sans texte autour) : {{ "competitors": [ {{ "name": "Nom", "website": "https://..." }} ] }}"""


def build_fallback_competitors_prompt(brand: str, city: str, domain_name: str) -> str:
    return f"""Trouve 5-10 concurrents de "{brand}" à {city} dans le domaine "{domain_name}".
Format JSON uniquement: {{"competitors": [{{"name": "...", "website": "..."}}]}}"""
