# locfitcore

`locfitcore` holds numerical pieces that local regression and local
likelihood smoothing are built from. Each module is plain Python and can be
used on its own.

## Installation

```
pip install locfitcore
```

To install the test tools as well:

```
pip install "locfitcore[test]"
```

## What is inside

| Module | Purpose |
| --- | --- |
| `locfitcore.densities` | Probability densities computed through saddle-point expansions: `dbinom`, `dpois`, `dbeta`, `df`, `dgamma`, `dchisq`, `dhyper`, `dnbinom`, `dt`, with the helpers `stirlerr`, `bd0`, `dbinom_raw` and `dpois_raw`. |
| `locfitcore.family` | Response families (`Family`) and links (`Link`). `evaluate` returns the mean, log-likelihood and its first and second derivatives as `LinkValues`. Also `default_link`, `valid_link`, `link_transform`, `inverse_link`, `robustify`, and the cumulant functions `b2`, `b3`, `b4`. |
| `locfitcore.residuals` | Residuals of several kinds (`ResidualType`, `resid`) and studentization (`studentize`). |
| `locfitcore.orderstats` | Distances (`rho`, with `Metric` and `Style`), order statistics (`kordstat`, `median`, `lforder`) and nearest-neighbour bandwidths (`compbandwid`). |
| `locfitcore.basis` | Local polynomial bases: `calcp`, `coefnumber`, `coef_numbers`, `fitfun`, `fitfun_angular`, `design_matrix`, with `KernelType`. |
| `locfitcore.intlimits` | Integration limits about a fitting point for density estimation (`set_int_limits`, `inre`, `EmptyIntegrationError`). |
| `locfitcore.onedint` | One-dimensional integrals of `x**j * exp(a + b*x + c*x**2)` (`explint1`, `explintyl`, `explinbkr`, `explinsid`, `explinfbk`, `explinfbk0`, `initi0i1`, `exbctay`, `solvetrid`, `recent`), closed forms for the exponential and Gaussian kernels (`onedexpl`, `onedgaus`), and product-kernel response assembly (`prodintresp`). |
| `locfitcore.trees` | Sizing and geometry of evaluation structures: `EvalStructure`, `kdtre_guessnv`, `atree_guessnv`, `sphere_guessnv`, `lfit_reqd`, `lfit_reqi`, the k-d tree steps `ksmall` and `newcell`, and vertex placement with `grid_points` and `sphere_points`. |

## Examples

Binomial and Poisson probabilities:

```python
from locfitcore.densities import dbinom, dpois

dbinom(3, 10, 0.4)               # probability of 3 successes in 10 trials
dpois(2, 1.5, give_log=True)     # log-probability
```

The log-likelihood of a Poisson observation under the log link:

```python
from locfitcore.family import Family, Link, evaluate

values = evaluate(0.2, 3.0, Family.POISSON, Link.LOG)
values.lik, values.dll, values.ddll
```

A local quadratic basis in two dimensions:

```python
from locfitcore.basis import KernelType, fitfun

fitfun([0.5, -0.2], [0.0, 0.0], degree=2, kernel_type=KernelType.SPHERICAL)
```

Vertices of a 3 by 2 grid on the unit square:

```python
from locfitcore.trees import grid_points

grid_points([0.0, 0.0], [1.0, 1.0], [3, 2])
```

## Errors

Errors are raised as exceptions. Invalid density parameters raise
`ValueError`. An unknown family or a link the family cannot use raises
`FamilyError`; a fitted value outside the family's parameter space raises
`BadParameterError`. An empty integration region raises
`EmptyIntegrationError`.

## What the package does not do

`locfitcore` provides building blocks only. It has no routine that fits a
local regression or density estimate from data end to end, no interpolation
of a fit across cells of an evaluation structure, no triangulated evaluation
structures, and no command-line tool.

## Running the tests

```
pytest
```