"""
Scoring Engine for the Against The Spread pick'em application

This module decides who won a game against the spread. Aggregated
leaderboards live in ats_pickem/services/standings.py.
"""

from decimal import Decimal


def calculate_spread_winner(favorite, underdog, line, favorite_score, underdog_score):
    """
    Work out the spread winner for a final score.

    The line is expressed relative to the favorite (-7.5 means the favorite
    gives 7.5 points, 0 is a pick'em). The favorite's margin is adjusted by
    the line:

        margin = (favorite_score - underdog_score) + line

    Returns:
        (favorite, False) when margin > 0 (favorite covers)
        (underdog, False) when margin < 0 (underdog covers, even if the
            favorite won outright)
        (None, True) when margin == 0 (push)

    Decimal arithmetic keeps the comparison exact for half-point lines
    stored as floats.
    """
    adjusted_margin = Decimal(favorite_score - underdog_score) + Decimal(str(line))

    if adjusted_margin > 0:
        return favorite, False
    if adjusted_margin < 0:
        return underdog, False
    return None, True


def calculate_outright_winner(favorite, underdog, favorite_score, underdog_score):
    """Straight-up winner for bowl outright picks, None on a tie"""
    if favorite_score > underdog_score:
        return favorite
    if underdog_score > favorite_score:
        return underdog
    return None


def calculate_pick_score(pick):
    """
    Calculate the weekly score for a single pick.

    Returns:
        1.0 for a pick that covered
        0.5 for a push (either side)
        0.0 for a loss or a game without a result
    """
    game = pick.game
    if not game or not game.has_result:
        return 0.0

    # Push: half a win for everyone who picked the game
    if game.is_push:
        return 0.5

    if pick.selected_team == game.spread_winner_name:
        return 1.0

    return 0.0


def calculate_bowl_points(bowl_pick):
    """Confidence points earned by a bowl pick; pushes earn nothing"""
    game = bowl_pick.bowl_game
    if not game or not game.has_result or game.is_push:
        return 0

    if bowl_pick.spread_pick == game.spread_winner_name:
        return bowl_pick.confidence_points

    return 0


def win_percentage(wins, losses, pushes):
    """Wins over decided and pushed games, as a percentage with one decimal"""
    # Wins already carry half a point per push, so pushes count once below
    decided = wins - 0.5 * pushes + losses
    played = decided + pushes
    if played <= 0:
        return 0.0
    return round(wins / played * 100, 1)
