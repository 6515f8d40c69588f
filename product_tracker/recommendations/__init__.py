"""
Recommendation engine: purchase verdicts, profile insights, product analysis.

Modules
-------
scorer   : find_similar_products() + partition_goals() + is_worth_buying()
           + build_recommendation_text() + score_purchase(): pure functions,
           randomness injected, no DB or I/O.
insights : most_common_category() + analyze_user_profile().
analysis : analyze_product() + extract_product_features(): templated.
strategy : ScoringStrategy ABC + RandomizedScoringStrategy + build_strategy().
"""
