import os

# Render matplotlib previews without a display
os.environ.setdefault("MPLBACKEND", "Agg")

import pytest

from descentchart.models import Chart, Family, Person


@pytest.fixture
def brown_family_text():
    return "\n".join(
        [
            "1. A. Brown (1819-1901)",
            "  sp. B. Green (1819-1861)",
            "   2. C. Brown (1840-1901)",
            "   2. D. Brown (1841-1910)",
        ]
    )


@pytest.fixture
def two_marriages_chart():
    """A person with two partners, children in both families and grandchildren."""
    return Chart(
        title="Example Descendant Chart",
        root=Person(
            id=1,
            details=["Person One", "b. 25 Oct 1850", "d. 12 Dec 1914"],
            families=[
                Family(
                    other=Person(id=2, details=["Spouse A"]),
                    details=["m. 14 Aug 1875"],
                    children=[
                        Person(id=3, details=["Fam A Child One"]),
                        Person(
                            id=4,
                            details=["Fam A Child Two"],
                            families=[
                                Family(
                                    other=Person(id=5, details=["Spouse C"]),
                                    children=[
                                        Person(id=6, details=["Fam C Child One"]),
                                        Person(id=7, details=["Fam C Child Two"]),
                                    ],
                                )
                            ],
                        ),
                    ],
                ),
                Family(
                    other=Person(id=8, details=["Spouse B"]),
                    details=["m. 14 Aug 1892"],
                    children=[
                        Person(id=9, details=["Fam B Child One"]),
                        Person(id=10, details=["Fam B Child Two"]),
                        Person(id=11, details=["Fam B Child Three"]),
                    ],
                ),
            ],
        ),
    )


ANCESTRY_CHART = """
1.Henry Johnson  b: Abt. 1806 in Kilford, Ireland. d: 17 Sep 1861 in Swindon, Wiltshire, England; age: 55.
  + Alice O'Connor  b: Abt. 1800 in Limerick, Ireland. d: 12 Oct 1896 in Trowbridge, Wiltshire, England; age: 96.
  2.Elizabeth Johnson  b: 7 Dec 1838 in Chippenham, Wiltshire, England. d: Bef. 1928 in Swindon, Wiltshire, England; age: 89.
  + George Martin  b: abt 1835 in Ireland. m: 28 Jun 1857 in Swindon, Wiltshire, England. d: Mar 1883 in Swindon, Wiltshire, England; age: 48.
    3.Elizabeth Ann Martin  b: 24 Apr 1858. d: 1859; age: 0.
    3.Martha Martin  b: abt 1860 in Trowbridge, Wiltshire, England. d: Deceased.
  2.Susan Johnson  b: 25 Apr 1840 in Swindon, Wiltshire, England. d: Deceased.
  2.Anna Johnson  b: 22 May 1842 in Chippenham, Wiltshire, England. d: 1 Oct 1898 in Bath, Somerset, England; age: 56.
  + William Brown  b: Abt. 1839 in Limerick, Ireland. m: 13 Nov 1864 in Swindon, Wiltshire, England. d: 11 May 1867 in Bath, Somerset, England; age: 28.
    3.Thomas Brown  b: 3 Nov 1865 in Trowbridge, Wiltshire, England. d: Deceased.
    + Charles Lewis  b: 1 Nov 1843 in Bristol, Gloucestershire, England. m: 7 Dec 1867 in Swindon, Wiltshire, England. d: Bef. 1871 in Trowbridge, Wiltshire, England; age: 27.
    3.Emily Lewis  b: 15 Oct 1868 in Swindon, Wiltshire, England. d: 8 Aug 1956 in Wiltshire, England; age: 87.
    + Alfred Green  b: 25 Feb 1864 in Norton, Somerset, England. m: 4 Sep 1888 in Swindon, Wiltshire, England. d: 28 Feb 1955 in Chippenham, Wiltshire, England; age: 91.
    + Joseph Navarro  b: 1840 in Bristol, Gloucestershire, England. m: 28 Oct 1872 in Swindon, Wiltshire, England. d: 15 July 1880 in Trowbridge, Wiltshire, England; age: 40.
  2.David Johnson  b: 15 Feb 1844 in Chippenham, Wiltshire, England. d: Oct 1916 in Swindon, Wiltshire, England; age: 72.
  + Martha Jane Harper  b: abt 1846 in Fleur-de-Lys, Monmouthshire, Wales. m: 17 Sep 1873 in Swindon, Wiltshire, England. d: Jul 1923 in Swindon, Wiltshire, England; age: 77.
    3.John H Johnson  b: abt 1875 in Swindon, Wiltshire, England. d: Deceased.
    3.Jane Elizabeth Harper Johnson  b: 1880 in Swindon, Wiltshire, England. d: Deceased.
  2.James Johnson  b: 30 Mar 1849 in Chippenham, Wiltshire, England. d: 6 Apr 1849 in Chippenham, Wiltshire, England; age: 0.
  2.Peter Johnson  b: 2 Nov 1851 in Trowbridge, Wiltshire, England. d: Jun 1936 in Swindon, Wiltshire, England; age: 84.
  + Helen Clark  b: abt 1854 in Trowbridge, Wiltshire, England. m: 2 Dec 1872 in Christchurch, Wiltshire, England. d: 25 Jul 1935 in Swindon, Wiltshire, England; age: 81.
    3.Samuel Johnson  b: abt 1874 in Trowbridge, Wiltshire, England. d: Dec 1948 in Chippenham, Wiltshire, England; age: 74.
    + Mary Wells  b: abt 1875 in Nk, Wiltshire, England. m: Jul 1902 in Wiltshire, England. d: Deceased.
    3.Eliza Johnson  b: abt 1882 in Devizes, Wiltshire, England. d: Abt 1961 in Salisbury, Wiltshire, England; age: 79.
"""


@pytest.fixture
def ancestry_text():
    return ANCESTRY_CHART
